"""Shared fixtures for lockgraph tests."""

import json
import sys
import textwrap
from pathlib import Path

import pytest

# Add src to path so tests can import lockgraph without an install
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def package_lock_v1():
    """npm v1 lockfile with a nested dev subtree and a requires link."""
    return json.dumps({
        "name": "demo-app",
        "version": "1.2.0",
        "lockfileVersion": 1,
        "dependencies": {
            "express": {
                "version": "4.18.2",
                "requires": {"debug": "2.6.9"},
                "dependencies": {
                    "debug": {"version": "2.6.9"},
                },
            },
            "debug": {"version": "4.3.4"},
            "jest": {
                "version": "29.7.0",
                "dev": True,
                "dependencies": {
                    "chalk": {"version": "4.1.2"},
                },
            },
            "fsevents": {"version": "2.3.3", "optional": True},
        },
    })


@pytest.fixture
def package_lock_v3():
    """npm v3 lockfile using only the flat packages table."""
    return json.dumps({
        "name": "demo-app",
        "version": "2.0.0",
        "lockfileVersion": 3,
        "packages": {
            "": {"name": "demo-app", "version": "2.0.0", "dependencies": {"react": "^18.2.0"}},
            "node_modules/react": {
                "version": "18.2.0",
                "dependencies": {"loose-envify": "^1.1.0"},
            },
            "node_modules/loose-envify": {"version": "1.4.0"},
            "node_modules/@babel/core": {"version": "7.23.0", "dev": True},
            "node_modules/@babel/core/node_modules/semver": {"version": "6.3.1", "dev": True},
            "node_modules/semver": {"version": "7.5.4", "peer": True},
        },
    })


@pytest.fixture
def yarn_lock():
    return textwrap.dedent(
        """\
        # THIS IS AN AUTOGENERATED FILE. DO NOT EDIT THIS FILE DIRECTLY.
        # yarn lockfile v1


        "@babel/code-frame@^7.0.0", "@babel/code-frame@^7.22.13":
          version "7.22.13"
          resolved "https://registry.yarnpkg.com/@babel/code-frame/-/code-frame-7.22.13.tgz"
          dependencies:
            "@babel/highlight" "^7.22.13"
            chalk "^2.4.2"

        "@babel/highlight@^7.22.13":
          version "7.22.20"
          dependencies:
            chalk "^2.4.2"

        chalk@^2.4.2:
          version "2.4.2"
          optionalDependencies:
            supports-color "^5.3.0"

        chalk@^4.1.0:
          version "4.1.2"

        supports-color@^5.3.0:
          version "5.5.0"
        """
    )


@pytest.fixture
def pnpm_lock():
    return textwrap.dedent(
        """\
        lockfileVersion: '6.0'

        dependencies:
          react:
            specifier: ^18.2.0
            version: 18.2.0

        devDependencies:
          typescript:
            specifier: ^5.2.2
            version: 5.2.2

        packages:

          /js-tokens@4.0.0:
            resolution: {integrity: sha512-abc}
            dev: false

          /loose-envify@1.4.0:
            resolution: {integrity: sha512-def}
            hasBin: true
            dependencies:
              js-tokens: 4.0.0
            dev: false

          /react@18.2.0:
            resolution: {integrity: sha512-ghi}
            engines: {node: '>=0.10.0'}
            dependencies:
              loose-envify: 1.4.0
            dev: false

          /typescript@5.2.2:
            resolution: {integrity: sha512-jkl}
            dev: true

          /orphan@1.0.0:
            resolution: {integrity: sha512-mno}
            dev: false
        """
    )
