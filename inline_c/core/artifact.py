"""
Artifact inspection — hash and identify the linked executable.

On ELF platforms the header is read with pyelftools (type, machine and
GNU build-id).  Other formats (Mach-O, PE) are recorded with ``is_elf``
False; that is not a failure.  No DWARF parsing.
"""
from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Optional

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from inline_c.io.schema import ArtifactMeta, ElfMeta

logger = logging.getLogger(__name__)

ELF_MAGIC = b"\x7fELF"


def hash_file(path: Path) -> str:
    """SHA-256 of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def read_elf_meta(path: Path) -> Optional[ElfMeta]:
    """ELF header facts for *path*, or None if it is not an ELF file."""
    with open(path, "rb") as f:
        if f.read(4) != ELF_MAGIC:
            return None
        f.seek(0)
        try:
            elf = ELFFile(f)
            build_id = None
            section = elf.get_section_by_name(".note.gnu.build-id")
            if section is not None:
                for note in section.iter_notes():
                    if note["n_type"] == "NT_GNU_BUILD_ID":
                        build_id = note["n_desc"]
            return ElfMeta(
                elf_type=str(elf.header["e_type"]),
                arch=str(elf.header["e_machine"]),
                build_id=build_id,
            )
        except ELFError as e:
            logger.warning(f"ELF header of {path} could not be parsed: {e}")
            return None


def inspect_artifact(path: Path) -> ArtifactMeta:
    """Collect metadata for the executable at *path*."""
    elf = read_elf_meta(path)
    return ArtifactMeta(
        sha256=hash_file(path),
        size_bytes=path.stat().st_size,
        is_elf=elf is not None,
        elf=elf or ElfMeta(),
    )
