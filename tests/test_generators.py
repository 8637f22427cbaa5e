# tests/test_generators.py
"""
Build-file generation, Rust binding generation and manifest edits.
All three shell out; the FakeRunner stands in for the external tools.
"""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from boringssl_roll import bindgen
from boringssl_roll.build_files import generate_build_files
from boringssl_roll.config import ManifestEntryKind
from boringssl_roll.errors import GenerationError, ManifestError
from boringssl_roll.manifest import edit_args, update_manifest

from tests.conftest import NEW_REV


# -----------------------------------------------------------------------------
# Build files
# -----------------------------------------------------------------------------
def test_generate_build_files_runs_generator_in_vendored_root(fake_runner, settings) -> None:
    generate_build_files(settings)

    cwd, cmd = fake_runner.calls[0]
    assert cwd == str(settings.boringssl_dir)
    assert cmd == [
        "python3",
        str(settings.boringssl_src / "util" / "generate_build_files.py"),
        "gn",
    ]


def test_generate_build_files_failure(fake_runner, settings) -> None:
    fake_runner.respond("generate_build_files.py", fail=True)
    with pytest.raises(GenerationError):
        generate_build_files(settings)


def test_generate_build_files_missing_script(fake_runner, settings) -> None:
    (settings.boringssl_src / "util" / "generate_build_files.py").unlink()
    with pytest.raises(GenerationError):
        generate_build_files(settings)
    assert fake_runner.calls == []


# -----------------------------------------------------------------------------
# Rust bindings
# -----------------------------------------------------------------------------
@pytest.fixture
def crate(tmp_path: Path):
    include = tmp_path / "src" / "include" / "openssl"
    include.mkdir(parents=True)
    for name in ("sha.h", "aead.h", "arm_arch.h", "lhash_macros.h", "README"):
        (include / name).write_text("/* */\n", encoding="utf-8")
    crate_dir = tmp_path / "rust" / "boringssl-sys"
    (crate_dir / "src").mkdir(parents=True)
    return include, crate_dir


def _fake_bindgen_output(cwd, cmd) -> None:
    out = Path(cmd[cmd.index("-o") + 1])
    out.write_text("pub fn SHA256_Init() {}\n", encoding="utf-8")


def test_list_headers_excludes_platform_headers(crate) -> None:
    include, _ = crate
    assert bindgen.list_headers(include) == ["aead.h", "sha.h"]


def test_postprocess_prepends_preamble_verbatim() -> None:
    raw = "/* automatically generated by rust-bindgen */\n\npub fn f() {}\n"
    out = bindgen.postprocess_bindings(raw)

    assert out.endswith(raw)
    assert out.startswith("// Copyright 2018 The Fuchsia Authors.")
    assert "#![allow(non_camel_case_types)]" in out
    assert "#![allow(non_snake_case)]" in out
    assert "#![allow(non_upper_case_globals)]" in out
    assert '#[link(name = "crypto")] extern {}' in out


def test_generate_bindings(fake_runner, crate) -> None:
    include, crate_dir = crate
    seen = {}

    def effect(cwd, cmd):
        aggregate = Path(cmd[1])
        seen["aggregate"] = aggregate.read_text(encoding="utf-8")
        _fake_bindgen_output(cwd, cmd)

    fake_runner.respond("bindgen", effect=effect)
    out = bindgen.generate_bindings(include, crate_dir / "src" / "lib.rs")

    assert seen["aggregate"] == "#include <openssl/aead.h>\n#include <openssl/sha.h>\n"
    cwd, cmd = fake_runner.calls[0]
    assert cwd == str(crate_dir)
    assert cmd.count(bindgen.ALLOWLIST) == 3
    assert "--allowlist-function" in cmd
    assert cmd[cmd.index("--") + 1:] == ["-I", str(include.parent), "--target=x86_64-fuchsia"]

    text = out.read_text(encoding="utf-8")
    assert text == bindgen.PREAMBLE + "pub fn SHA256_Init() {}\n"
    assert not (crate_dir / bindgen.AGGREGATE_HEADER).exists()


def test_generate_bindings_failure_cleans_up(fake_runner, crate) -> None:
    include, crate_dir = crate
    fake_runner.respond("bindgen", fail=True)

    with pytest.raises(GenerationError):
        bindgen.generate_bindings(include, crate_dir / "src" / "lib.rs")
    assert not (crate_dir / bindgen.AGGREGATE_HEADER).exists()


def test_generate_bindings_unreadable_header_root(fake_runner, tmp_path) -> None:
    with pytest.raises(GenerationError):
        bindgen.generate_bindings(tmp_path / "missing", tmp_path / "crate" / "src" / "lib.rs")
    assert fake_runner.calls == []


def test_allowlist_restricts_to_boringssl_namespace() -> None:
    pattern = re.compile(bindgen.ALLOWLIST)
    assert pattern.fullmatch("EVP_AEAD_CTX_init")
    assert pattern.fullmatch("SHA256_Update")
    assert not pattern.fullmatch("memcpy")
    assert not pattern.fullmatch("pthread_mutex_t")


# -----------------------------------------------------------------------------
# Manifests
# -----------------------------------------------------------------------------
def test_edit_args() -> None:
    assert edit_args("m.xml", "third_party/boringssl", NEW_REV) == [
        "edit", f"-project=third_party/boringssl={NEW_REV}", "m.xml",
    ]
    assert edit_args("m.xml", "boringssl", "abc", ManifestEntryKind.IMPORT)[1] == "-import=boringssl=abc"


def test_update_manifest(fake_runner, settings) -> None:
    update_manifest(settings, settings.manifest_path, "third_party/boringssl", NEW_REV)

    cwd, cmd = fake_runner.calls[0]
    assert cwd == str(settings.manifest_path.parent)
    assert cmd == ["jiri", "edit", f"-project=third_party/boringssl={NEW_REV}", str(settings.manifest_path)]


def test_update_manifest_failure(fake_runner, settings) -> None:
    fake_runner.respond("jiri", fail=True)
    with pytest.raises(ManifestError):
        update_manifest(settings, settings.manifest_path, "third_party/boringssl", NEW_REV)


def test_update_manifest_missing_file(fake_runner, settings, tmp_path) -> None:
    with pytest.raises(ManifestError):
        update_manifest(settings, tmp_path / "nope", "third_party/boringssl", NEW_REV)
    assert fake_runner.calls == []
