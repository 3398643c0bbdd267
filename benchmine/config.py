#!/usr/bin/env python3

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from benchmine.symbols import STDLIB_USRS

CONFIG_FILE_NAME = "benchmine_config.json"


class ExtractorConfig(BaseModel):
    """Settings for extracting self-contained benchmark files."""

    # Wall-clock budget for one extraction, in seconds
    timeout: float = Field(default=30.0, ge=0)

    # Index whole files as they are popped (True) or search each file for one symbol (False)
    cache: bool = True

    # Front end settings
    clang_args: list[str] = Field(default_factory=lambda: ["-std=c99"])
    extension: str = "c"  # candidate source file extension

    # USRs that are never explored
    stdlib_usrs: set[str] = Field(default_factory=lambda: set(STDLIB_USRS))

    # Root file harvesting
    capture_function_macros: bool = False
    includes_from_all_files: bool = False

    def stdlib_allowlist(self) -> frozenset[str]:
        return frozenset(self.stdlib_usrs)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "ExtractorConfig":
        """Load configuration from a JSON file."""
        args = json.loads(Path(config_path).read_text())
        return cls.model_validate(args)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to a JSON file."""
        data = self.model_dump(mode="json")
        data["stdlib_usrs"] = sorted(self.stdlib_usrs)
        Path(config_path).write_text(json.dumps(data, indent=2))

    @classmethod
    def find_config(cls, start_path: Path) -> Optional["ExtractorConfig"]:
        """Find configuration by searching up the directory tree."""
        current = Path(start_path).resolve()
        while current != current.parent:
            config_file = current / CONFIG_FILE_NAME
            if config_file.exists():
                return cls.load_from_file(config_file)
            current = current.parent
        return None
