"""Form CLI commands: check, validate and public."""

import asyncio
import json
import mimetypes
from pathlib import Path

import click

from formguard.config import CaptchaSettings
from formguard.forms.loader import load_form, load_submission
from formguard.forms.normalization import extract_file_paths, field_results_to_object
from formguard.forms.redaction import make_fields_public
from formguard.forms.types import FieldType, FormguardError, UploadedFile
from formguard.validation.instance import FormValidator
from formguard.validation.meta import validate_form_meta
from formguard.validation.types import ValidationResult


def _load_form_or_exit(path: Path):
    try:
        return load_form(path)
    except FormguardError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)


def _parse_upload(raw: str) -> UploadedFile:
    """Parse ``NAME=PATH[:MIMETYPE]`` into an upload descriptor."""
    name, sep, rest = raw.partition("=")
    if not sep or not name or not rest:
        raise click.BadParameter(f"Expected NAME=PATH[:MIMETYPE], got '{raw}'", param_hint="--upload")

    path_str, _, mimetype = rest.partition(":")
    path = Path(path_str)
    if not path.is_file():
        raise click.BadParameter(f"File not found: {path}", param_hint="--upload")

    payload = path.read_bytes()
    return UploadedFile(
        field_name=name,
        mimetype=mimetype or mimetypes.guess_type(path.name)[0],
        size=len(payload),
        payload=payload,
        original_name=path.name,
    )


def _report(result: ValidationResult, label: str) -> None:
    for error in result.errors:
        click.echo(click.style(f"[{error.code or 'ERROR'}] {error.message}", fg="red"))

    if not result.valid:
        click.echo(
            click.style(f"\n{len(result.errors)} {label} error(s) found", fg="red", bold=True)
        )
        raise SystemExit(1)


@click.group()
def form():
    """Form definition commands."""
    pass


@form.command()
@click.argument("form_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def check(form_path: Path):
    """Validate a form definition file."""
    fields = _load_form_or_exit(form_path)
    result = validate_form_meta(fields)
    _report(result, "schema")

    click.echo(f"Loaded {len(fields)} top-level field(s):")
    for f in fields:
        type_name = f.type.value if isinstance(f.type, FieldType) else f.type
        click.echo(f"  ✓ {f.slug} ({type_name})")

    file_paths = extract_file_paths(fields)
    if file_paths:
        click.echo("File fields: " + ", ".join(file_paths))

    click.echo(click.style("\nForm definition is valid.", fg="green", bold=True))


@form.command()
@click.argument("form_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("submission_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--upload",
    "uploads",
    multiple=True,
    metavar="NAME=PATH[:MIMETYPE]",
    help="Attach a file to the file field NAME. May be repeated.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
def validate(form_path: Path, submission_path: Path, uploads: tuple[str, ...], as_json: bool):
    """Validate a submission against a form definition."""
    fields = _load_form_or_exit(form_path)
    try:
        results = load_submission(submission_path)
    except FormguardError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    files = [_parse_upload(raw) for raw in uploads]
    try:
        validator = FormValidator(captcha=CaptchaSettings.from_env())
    except ValueError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    result = asyncio.run(validator.validate_form(results, fields, files))

    if as_json:
        output = result.to_dict()
        if result.valid:
            secret_slugs = [f.slug for f in fields if f.type is FieldType.RECAPTCHA]
            output["data"] = field_results_to_object(results, secret_slugs)
        click.echo(json.dumps(output, indent=2, default=str))
        if not result.valid:
            raise SystemExit(1)
        return

    _report(result, "submission")
    click.echo(click.style("Submission is valid.", fg="green", bold=True))


@form.command()
@click.argument("form_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def public(form_path: Path):
    """Print the form definition with secrets removed, as JSON."""
    fields = _load_form_or_exit(form_path)
    click.echo(json.dumps([f.to_dict() for f in make_fields_public(fields)], indent=2))
