#!/usr/bin/env python3

import click
import pytest
from click.testing import CliRunner

from json_schema_to_validator.cli_utils import reconstruct_command_line
from json_schema_to_validator.json_schema_to_validator import json_schema_to_validator


class TestCliUtils:
    """Test cases for CLI utilities"""

    def test_reconstruct_command_line_without_context(self):
        """Test command reconstruction without active Click context (fallback)"""
        assert reconstruct_command_line(json_schema_to_validator) == "json_schema_to_validator"

    def test_reconstruct_command_line_with_context(self, tmp_path):
        """Test that arguments, non-default options and flags are reconstructed"""
        schema = tmp_path / "pet.json"
        schema.write_text("{}")
        seen = []

        @click.command()
        @click.option("--target", "-t", default="pydantic")
        @click.option("--verbose", is_flag=True, default=False)
        @click.argument("path", type=click.Path(exists=True))
        def command(target, verbose, path):
            seen.append(reconstruct_command_line(command))

        result = CliRunner().invoke(command, [str(schema), "-t", "marshmallow", "--verbose"])
        assert result.exit_code == 0, result.output
        assert seen == ["json_schema_to_validator pet.json --target marshmallow --verbose"]


if __name__ == "__main__":
    pytest.main([__file__])
