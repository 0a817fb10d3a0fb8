import json
import logging
from pathlib import Path

import click

from .cli_utils import reconstruct_command_line
from .converter import SUPPORTED_TARGETS, generate
from .pipeline import ConversionError, ConversionOptions, resolve_ref
from .pipeline.analyzer.reference_resolver import split_fragment


@click.command()
@click.option("--name", "-n", default=None, type=str, help="Name of the generated validator")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--target", "-t", default="pydantic", type=click.Choice([*SUPPORTED_TARGETS, "all"]))
@click.option("--pointer", "-p", default=None, type=str, help="Local fragment selecting the schema, e.g. #/components/schemas/User")
@click.option("--verbose", is_flag=True, default=False, help="Log conversion details")
@click.argument("path", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", required=False, default=None, type=click.Path(resolve_path=True))
def json_schema_to_validator(name, config, target, pointer, verbose, path, output):
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    with open(path) as f:
        document = json.load(f)

    stem = Path(path).name.split(".")[0]
    try:
        if config is not None:
            with open(config) as f:
                options = ConversionOptions.from_dict(json.load(f))
        else:
            options = ConversionOptions()

        if pointer is not None:
            schema = resolve_ref(pointer, document, options.definitions)
            segments = split_fragment(pointer)
            default_name = segments[-1] if segments else stem
        else:
            schema = document
            default_name = stem

        options = options.with_changes(
            schema_name=name or options.schema_name or default_name,
            root_document=options.root_document if options.root_document is not None else document,
            generation_comment=f"Generated by {reconstruct_command_line(json_schema_to_validator)}",
        )

        if target == "all":
            if output is None:
                raise click.UsageError("OUTPUT directory is required with --target all")
            out_dir = Path(output)
            out_dir.mkdir(parents=True, exist_ok=True)
            for target_name in SUPPORTED_TARGETS:
                result = generate(schema, target_name, options)
                (out_dir / f"{stem}_{target_name}.py").write_text(result.code)
                _print_warnings(target_name, result.diagnostics)
            return

        result = generate(schema, target, options)
    except ConversionError as exc:
        raise click.ClickException(str(exc)) from exc

    if output is None:
        click.echo(result.code, nl=False)
    else:
        with open(output, "w") as f:
            f.write(result.code)
    _print_warnings(target, result.diagnostics)


def _print_warnings(target: str, diagnostics: list[str]) -> None:
    for message in diagnostics:
        click.echo(f"Warning: ({target}) {message}", err=True)
