from setuptools import setup, find_packages

def parse_requirements(requirements):
    with open(requirements) as f:
        return [l.strip('\n') for l in f if l.strip('\n') and not l.startswith('#')]

requirements = parse_requirements("requirements.txt")

setup(
    name='studentperf_backend',
    version='0.0.1',
    install_requires=requirements,
    packages=find_packages(include=["studentperf_backend", "studentperf_backend.*"]),
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)
