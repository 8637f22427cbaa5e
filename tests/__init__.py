# tests/__init__.py
"""
Test suite for boringssl_roll.

External tools (git, jiri, bindgen, the build-file generator) are never run;
tests swap `boringssl_roll.runner.run` for the FakeRunner in conftest.py and
build throwaway Fuchsia trees under tmp_path.
"""
