"""Options Loader for reading and writing option files in YAML."""

from pathlib import Path
from typing import Any

import pydantic
import yaml

from structgen.errors import ValidationError
from structgen.options.base import ConversionOptions

_KNOWN_KEYS = {"dialect", "tag_style", "use_pointer_for_nullable", "root_name"}


class OptionsLoader:
    """Loads ConversionOptions from YAML files."""

    def load_file(self, path: Path | str) -> ConversionOptions:
        """Load options from a YAML file.

        Args:
            path: Path to the YAML file

        Returns:
            Loaded ConversionOptions instance
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Options file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return self._parse_options(data, source=str(path))

    def load_from_string(self, content: str) -> ConversionOptions:
        """Load options from a YAML string.

        Args:
            content: YAML content as string

        Returns:
            Loaded ConversionOptions instance
        """
        data = yaml.safe_load(content)
        return self._parse_options(data, source="<string>")

    def _parse_options(self, data: Any, source: str) -> ConversionOptions:
        """Parse option data from YAML structure."""
        if data is None:
            return ConversionOptions()

        if not isinstance(data, dict):
            raise ValidationError(f"{source}: options must be a mapping")

        unknown = sorted(set(data) - _KNOWN_KEYS)
        if unknown:
            raise ValidationError(f"{source}: unknown option(s): {', '.join(unknown)}")

        try:
            return ConversionOptions(**data)
        except pydantic.ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"{source}: invalid options: {problems}") from e

    def save_file(self, options: ConversionOptions, path: Path | str) -> None:
        """Save options to a YAML file.

        Args:
            options: The options to save
            path: Path for the output file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(options.to_dict(), f, default_flow_style=False, sort_keys=False)


def load_options(path: Path | str) -> ConversionOptions:
    """Convenience function to load options from a file.

    Args:
        path: Path to the YAML file

    Returns:
        Loaded ConversionOptions instance
    """
    loader = OptionsLoader()
    return loader.load_file(path)
