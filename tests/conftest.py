# tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

from boringssl_roll import runner
from boringssl_roll.config import RollSettings
from boringssl_roll.errors import ProcessFailure
from boringssl_roll.stamp import README_URL_PREFIX

OLD_REV = "deadbeef" * 5
NEW_REV = "cafef00d" * 5


def readme_bytes(revision: str, prefix: str = README_URL_PREFIX) -> bytes:
    return (
        b"Name: BoringSSL\n"
        b"License: BSD-style\n"
        b"Upstream Git: https://boringssl.googlesource.com/boringssl\n\n"
        + f"Source: {prefix}{revision}/".encode("ascii")
    )


class FakeRunner:
    """
    Stand-in for runner.run. Rules are (substring, output, fail, effect);
    the first rule whose substring occurs in the command line answers.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[Optional[str], List[str]]] = []
        self._rules: List[Tuple[str, bytes, bool, Optional[Callable]]] = []

    def respond(
        self,
        match: str,
        output: bytes = b"",
        *,
        fail: bool = False,
        effect: Optional[Callable[[Optional[str], List[str]], None]] = None,
    ) -> None:
        self._rules.append((match, output, fail, effect))

    def __call__(self, cwd, name, *args, error=ProcessFailure, merge_stderr=True) -> bytes:
        cmd = [str(name), *(str(a) for a in args)]
        self.calls.append((str(cwd) if cwd else None, cmd))
        line = " ".join(cmd)
        for match, output, fail, effect in self._rules:
            if match in line:
                if fail:
                    raise error(cmd, output="boom", returncode=1)
                if effect is not None:
                    effect(str(cwd) if cwd else None, cmd)
                return output
        return b""

    @property
    def commands(self) -> List[str]:
        return [" ".join(cmd) for _, cmd in self.calls]


@pytest.fixture
def fake_runner(monkeypatch) -> FakeRunner:
    fake = FakeRunner()
    monkeypatch.setattr(runner, "run", fake)
    return fake


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """
    Minimal Fuchsia-style tree:

        third_party/boringssl/README.fuchsia
        third_party/boringssl/src/{crypto/,include/openssl/,util/}
        zircon/third_party/ulib/uboringssl/{README.fuchsia.md,BUILD.gn}
        integration/fuchsia/third_party/flower
    """
    boring = tmp_path / "third_party" / "boringssl"
    src = boring / "src"
    (src / "crypto").mkdir(parents=True)
    (src / "include" / "openssl").mkdir(parents=True)
    (src / "util").mkdir(parents=True)
    (src / "util" / "generate_build_files.py").write_text("# generator\n", encoding="utf-8")
    (boring / "README.fuchsia").write_bytes(readme_bytes(OLD_REV))

    zircon = tmp_path / "zircon" / "third_party" / "ulib" / "uboringssl"
    zircon.mkdir(parents=True)
    (zircon / "README.fuchsia.md").write_bytes(readme_bytes(OLD_REV))
    (zircon / "BUILD.gn").write_text("source_set(\"uboringssl\") {}\n", encoding="utf-8")

    manifest = tmp_path / "integration" / "fuchsia" / "third_party" / "flower"
    manifest.parent.mkdir(parents=True)
    manifest.write_text("<manifest/>\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def make_settings(workspace: Path) -> Callable[..., RollSettings]:
    def _make(**overrides) -> RollSettings:
        overrides.setdefault("FUCHSIA_DIR", str(workspace))
        return RollSettings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def settings(make_settings) -> RollSettings:
    return make_settings()
