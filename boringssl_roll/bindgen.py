# boringssl_roll/bindgen.py
"""
Rust bindings for boringssl-sys.

bindgen is run over an aggregate header that includes every public BoringSSL
header, restricted by an allow-list so platform and libc symbols visible on
the host do not leak into the crate. The raw output is then prefixed with the
license header, lint suppressions for C naming, and the link directive.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from . import runner
from .errors import GenerationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Platform-specific headers that do not compile everywhere.
EXCLUDED_HEADERS = frozenset({"arm_arch.h", "lhash_macros.h"})

SYMBOL_PREFIXES = (
    "ERR", "BIO", "CRYPTO", "RAND", "V_ASN1", "ASN1", "B_ASN1", "CBS_ASN1", "CAST",
    "EVP", "CBS", "CBB", "CIPHER", "OPENSSL", "SSLEAY", "DH", "DES", "DIGEST", "DSA",
    "NID", "EC", "ECDSA", "ECDH", "ED25519", "X25519", "PKCS5_PBKDF2", "SHA", "SHA1",
    "SHA224", "SHA256", "SHA384", "SHA512", "HMAC",
)

ALLOWLIST = "(" + "|".join(SYMBOL_PREFIXES) + ")_.*"

LICENSE_HEADER = """\
// Copyright 2018 The Fuchsia Authors. All rights reserved.
// Use of this source code is governed by a BSD-style license that can be
// found in the LICENSE file.
"""

PREAMBLE = (
    LICENSE_HEADER
    + "\n"
    + "#![allow(non_camel_case_types)]\n"
    + "#![allow(non_snake_case)]\n"
    + "#![allow(non_upper_case_globals)]\n"
    + "\n"
    + '#[link(name = "crypto")] extern {}\n'
    + "\n"
)

AGGREGATE_HEADER = "bindgen.h"


def list_headers(header_root: PathLike) -> List[str]:
    try:
        names = sorted(p.name for p in Path(header_root).iterdir() if p.is_file())
    except OSError as e:
        raise GenerationError(
            ["bindgen"], output=str(e), message=f"Cannot read header directory {header_root}: {e}"
        ) from e
    return [n for n in names if n.endswith(".h") and n not in EXCLUDED_HEADERS]


def write_aggregate_header(header_root: PathLike, dest: PathLike) -> Path:
    """Write a header that #includes every usable <openssl/...> header."""
    includes = [f"#include <openssl/{name}>\n" for name in list_headers(header_root)]
    if not includes:
        raise GenerationError(["bindgen"], message=f"No headers found in {header_root}")
    out = Path(dest)
    out.write_text("".join(includes), encoding="utf-8")
    return out


def postprocess_bindings(generated: str, preamble: str = PREAMBLE) -> str:
    return preamble + generated


def bindgen_args(
    aggregate: PathLike,
    output_file: PathLike,
    include_dir: PathLike,
    *,
    target: str = "x86_64-fuchsia",
    allowlist: str = ALLOWLIST,
    extra_clang_args: Optional[Iterable[str]] = None,
) -> List[str]:
    args = [
        str(aggregate),
        "--allowlist-function", allowlist,
        "--allowlist-type", allowlist,
        "--allowlist-var", allowlist,
        "-o", str(output_file),
        "--",
        "-I", str(include_dir),
        f"--target={target}",
    ]
    args.extend(extra_clang_args or ())
    return args


def generate_bindings(
    header_root: PathLike,
    output_file: PathLike,
    *,
    bindgen: str = "bindgen",
    target: str = "x86_64-fuchsia",
    workdir: Optional[PathLike] = None,
) -> Path:
    """
    Regenerate `output_file` from the headers in `header_root`
    (e.g. src/include/openssl). Returns the output path.
    """
    header_root = Path(header_root)
    output = Path(output_file)
    crate_dir = Path(workdir) if workdir else output.parent.parent
    aggregate = crate_dir / AGGREGATE_HEADER

    logger.info("Generating Rust bindings into %s", output)
    write_aggregate_header(header_root, aggregate)
    try:
        runner.run(
            crate_dir,
            bindgen,
            *bindgen_args(aggregate, output, header_root.parent, target=target),
            error=GenerationError,
        )
        generated = output.read_text(encoding="utf-8")
        output.write_text(postprocess_bindings(generated), encoding="utf-8")
    finally:
        aggregate.unlink(missing_ok=True)

    return output


__all__ = [
    "EXCLUDED_HEADERS",
    "ALLOWLIST",
    "PREAMBLE",
    "list_headers",
    "write_aggregate_header",
    "postprocess_bindings",
    "bindgen_args",
    "generate_bindings",
]
