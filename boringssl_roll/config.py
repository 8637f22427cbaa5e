# boringssl_roll/config.py
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .stamp import README_URL_PREFIX as DEFAULT_README_URL_PREFIX


class ManifestEntryKind(str, Enum):
    PROJECT = "project"
    IMPORT = "import"


# Files in uboringssl that are maintained in Fuchsia and never rolled.
DEFAULT_SUBSET_SKIP_FILES: Tuple[str, ...] = (
    "BUILD.gn",
    "README.fuchsia.md",
    "stack-note.S",
)

BASELINE_FILENAME = ".manual-edits.json"


class RollSettings(BaseSettings):
    """
    Immutable roll configuration.

    Built once by the CLI from the environment (and .env), with command-line
    flags applied as overrides, then handed to every stage.
    Relative paths are resolved against FUCHSIA_DIR.
    """

    # --- Workspace layout ---
    FUCHSIA_DIR: str = ""
    BORINGSSL_PATH: str = "third_party/boringssl"
    UBORINGSSL_PATH: str = "zircon/third_party/ulib/uboringssl"

    # --- Revision ---
    BORINGSSL_COMMIT: str = "origin/upstream/master"
    README_URL_PREFIX: str = DEFAULT_README_URL_PREFIX

    # --- Restricted subset ---
    SUBSET_SKIP_FILES: Tuple[str, ...] = DEFAULT_SUBSET_SKIP_FILES

    # --- Dependency manifests ---
    MANIFEST_PATH: str = "integration/fuchsia/third_party/flower"
    MANIFEST_PROJECT: str = "third_party/boringssl"
    MANIFEST_ENTRY_KIND: ManifestEntryKind = ManifestEntryKind.PROJECT
    SECONDARY_MANIFEST_PATH: Optional[str] = None

    # --- External tools ---
    PYTHON_BIN: str = "python3"
    GIT_BIN: str = "git"
    JIRI_BIN: str = "jiri"
    BINDGEN_BIN: str = "bindgen"
    BINDGEN_TARGET: str = "x86_64-fuchsia"

    # --- Trust bundle ---
    CERTDATA_URL: str = (
        "https://hg.mozilla.org/mozilla-central/raw-file/tip/"
        "security/nss/lib/ckfw/builtins/certdata.txt"
    )
    CERTDATA_CONVERTER: str = "extract-nss-root-certs"
    TRUST_BUNDLE_PATH: str = "third_party/boringssl/cert.pem"
    HTTP_TIMEOUT: int = 60

    # --- Review ---
    GIT_REMOTE: str = "origin"
    REVIEW_BRANCH: str = "master"

    # --- Stage switches ---
    SKIP_BORINGSSL: bool = False
    SKIP_RUST: bool = False
    SKIP_ZIRCON: bool = False
    SKIP_MANIFEST: bool = False
    UPDATE_TRUST_BUNDLE: bool = False
    COMMIT_CHANGES: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    # --- Dynamic Path Resolution ---

    def resolve(self, rel: str) -> Path:
        if not self.FUCHSIA_DIR:
            raise ConfigurationError("FUCHSIA_DIR not set and --fuchsia not specified")
        p = Path(rel)
        if p.is_absolute():
            return p
        return Path(self.FUCHSIA_DIR).resolve() / p

    @property
    def root_dir(self) -> Path:
        return self.resolve(".")

    @property
    def boringssl_dir(self) -> Path:
        return self.resolve(self.BORINGSSL_PATH)

    @property
    def boringssl_src(self) -> Path:
        return self.boringssl_dir / "src"

    @property
    def boringssl_readme(self) -> Path:
        return self.boringssl_dir / "README.fuchsia"

    @property
    def uboringssl_dir(self) -> Path:
        return self.resolve(self.UBORINGSSL_PATH)

    @property
    def uboringssl_readme(self) -> Path:
        return self.uboringssl_dir / "README.fuchsia.md"

    @property
    def baseline_path(self) -> Path:
        return self.uboringssl_dir / BASELINE_FILENAME

    @property
    def rust_crate_dir(self) -> Path:
        return self.boringssl_dir / "rust" / "boringssl-sys"

    @property
    def manifest_path(self) -> Path:
        return self.resolve(self.MANIFEST_PATH)

    @property
    def secondary_manifest_path(self) -> Optional[Path]:
        if not self.SECONDARY_MANIFEST_PATH:
            return None
        return self.resolve(self.SECONDARY_MANIFEST_PATH)

    @property
    def trust_bundle_path(self) -> Path:
        return self.resolve(self.TRUST_BUNDLE_PATH)

    def validate_layout(self) -> None:
        """Fail early when the workspace does not contain the vendored tree."""
        if not self.FUCHSIA_DIR:
            raise ConfigurationError("FUCHSIA_DIR not set and --fuchsia not specified")
        if not self.root_dir.is_dir():
            raise ConfigurationError(f"Fuchsia root directory not found: {self.root_dir}")
        if not self.boringssl_dir.is_dir():
            raise ConfigurationError(f"BoringSSL repository not found: {self.boringssl_dir}")


__all__ = [
    "RollSettings",
    "ManifestEntryKind",
    "DEFAULT_SUBSET_SKIP_FILES",
    "BASELINE_FILENAME",
]
