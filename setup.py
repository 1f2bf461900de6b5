# see https://github.com/karlicoss/pymplate for up-to-date reference


from setuptools import setup, find_namespace_packages # type: ignore


def main() -> None:
    # works with both ordinary and namespace packages
    pkgs = find_namespace_packages('src')
    pkg = min(pkgs) # lexicographically smallest is the correct one usually?
    setup(
        name=pkg,
        use_scm_version={
            'version_scheme': 'python-simplified-semver',
            'local_scheme': 'dirty-tag',
            # when building outside of a git checkout
            'fallback_version': '0.1.0',
        },
        setup_requires=['setuptools_scm'],

        # otherwise mypy won't work
        # https://mypy.readthedocs.io/en/stable/installed_packages.html#making-pep-561-compatible-packages
        zip_safe=False,

        packages=pkgs,
        package_dir={'': 'src'},
        # necessary so that package works with mypy
        package_data={pkg: ['py.typed']},

        ## ^^^ this should be mostly automatic and not requiring any changes

        python_requires='>=3.11',
        install_requires=[
            'more-itertools',
            'click'        , # nicer cli
            'plumbum'      , # nicer command composition/piping
            'logzero'      , # nider logging
        ],
        extras_require={
            'testing': ['pytest'],
            'linting': [
                'pytest',
                'mypy',
                'types-click',  # kinda odd it doesn't do this automatically in tox?
            ],
        },
        entry_points={
            'console_scripts': ['toolshed = toolshed.core.cli:main'],
        },
    )


if __name__ == '__main__':
    main()
