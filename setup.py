from setuptools import setup, find_packages

setup(
    name='memspace',
    version='0.1',
    packages=find_packages(exclude=['tests*']),
    license='MIT',
    description='A simulated first-fit memory allocator with free-list compaction',
    python_requires='>=3.9',
    install_requires=['numpy'],
    extras_require={'test': ['pytest']},
)
