from setuptools import setup, find_packages

with open('README.rst', encoding='utf-8') as readme_file:
    readme = readme_file.read()

with open('HISTORY.rst', encoding='utf-8') as history_file:
    history = history_file.read()

with open('requirements.txt', encoding='utf-8') as requirements_file:
    all_pkgs = requirements_file.readlines()

requirements = [pkg.strip() for pkg in all_pkgs if pkg.strip() and "#" not in pkg]
test_requirements = ['pytest>=7']

setup(
    name='repo-scout',
    author='Cheng Chen',
    author_email='chenzi00103@gmail.com',
    description='repo-scout watches a GitHub repository: it scans the project layout on a schedule, asks an LLM for code analysis and fixes, files issues with the findings and answers chat questions about the project',
    python_requires='>=3.10',
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Intended Audience :: Developers',
        'Natural Language :: English',
        'Programming Language :: Python :: 3.10',
    ],
    entry_points={
        'console_scripts': [
            'repo-scout=repo_scout.cli:main',
        ],
    },
    install_requires=requirements,
    extras_require={'test': test_requirements},
    long_description=readme + '\n\n' + history,
    include_package_data=True,
    package_data={'repo_scout': ['conf/*.yaml']},
    keywords='repo_scout',
    packages=find_packages(include=['repo_scout', 'repo_scout.*']),
    version='0.1.0',
    zip_safe=False,
)
