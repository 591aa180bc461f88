#!/usr/bin/env python3
"""
pz-xml command line interface

Generate, validate and check explanatory note documents from the shell,
or start the REST API.

Usage:
    pz-xml generate data.json --schema 01.05 --out note.xml --validate
    pz-xml validate note.xml --schema 01.05
    pz-xml check-form data.json
    pz-xml serve --port 8000
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pz_core.config.settings import PipelineConfig, load_config, set_config
from pz_core.exceptions import PZError
from pz_core.generator import XMLGenerator
from pz_core.mapping.form_schema import load_form_schema
from pz_core.validation.xsd_validator import XSDValidator

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def read_form_data(path: Path) -> dict:
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def cmd_generate(args, config: PipelineConfig) -> int:
    if args.strict:
        config.generation.strict_required = True

    generator = XMLGenerator(config)
    version = args.schema or config.schema.default_version
    result = generator.generate_result(read_form_data(args.data_file), version)

    if result.missing_required:
        print(f"⚠ Missing required fields: {', '.join(result.missing_required)}", file=sys.stderr)

    if args.out:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(result.xml, encoding=config.export.encoding)
        print(f"✓ Written: {args.out}", file=sys.stderr)
    else:
        sys.stdout.write(result.xml)

    if args.validate:
        validation = XSDValidator(config.schema).validate(result.xml, result.schema_version)
        print(validation.summary(), file=sys.stderr)
        return 0 if validation.valid else 1
    return 0


def cmd_validate(args, config: PipelineConfig) -> int:
    version = args.schema or config.schema.default_version
    result = XSDValidator(config.schema).validate_file(args.xml_file, version,
                                                       encoding=config.export.encoding)
    print(result.summary())
    return 0 if result.valid else 1


def cmd_check_form(args, config: PipelineConfig) -> int:
    version = args.schema or config.schema.default_version
    schema = load_form_schema(version, config.schema)
    errors = schema.validate_data(read_form_data(args.data_file))

    if not errors:
        print(f"✓ Form data is valid for schema {version}")
        return 0

    print(f"✗ {len(errors)} problem(s) for schema {version}:")
    for error in errors:
        print(f"  {error['path']} [{error['type']}]: {error['message']}")
    return 1


def cmd_serve(args, config: PipelineConfig) -> int:
    import uvicorn
    from pz_editor.api import create_app

    uvicorn.run(create_app(config), host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pz-xml",
        description="Generate and validate Ministry of Construction explanatory note XML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate data.json --out note.xml --validate
  %(prog)s generate data.json --schema 01.03 > note.xml
  %(prog)s validate note.xml --schema 01.05
  %(prog)s check-form data.json
  %(prog)s --config pz-config.yaml serve --port 8000
        """
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Configuration file (.json, .yaml); default: PZXML_* environment variables"
    )

    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    gen = subparsers.add_parser("generate", help="Generate XML from form data JSON")
    gen.add_argument("data_file", type=Path, help="Form data JSON file")
    gen.add_argument("-s", "--schema", default=None, help="Schema version (default: configured)")
    gen.add_argument("-o", "--out", type=Path, default=None, help="Output XML file (default: stdout)")
    gen.add_argument("--validate", action="store_true",
                     help="Validate the result; exit code 1 if invalid")
    gen.add_argument("--strict", action="store_true",
                     help="Fail when required fields are missing")
    gen.set_defaults(handler=cmd_generate)

    val = subparsers.add_parser("validate", help="Validate an XML file against the XSD")
    val.add_argument("xml_file", type=Path, help="XML file to validate")
    val.add_argument("-s", "--schema", default=None, help="Schema version (default: configured)")
    val.set_defaults(handler=cmd_validate)

    check = subparsers.add_parser("check-form", help="Check form data against field rules")
    check.add_argument("data_file", type=Path, help="Form data JSON file")
    check.add_argument("-s", "--schema", default=None, help="Schema version (default: configured)")
    check.set_defaults(handler=cmd_check_form)

    serve = subparsers.add_parser("serve", help="Start the REST API")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    serve.set_defaults(handler=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else PipelineConfig.from_env()
    except (OSError, ValueError) as e:
        print(f"✗ Error: could not load configuration: {e}", file=sys.stderr)
        return 1
    if args.log_level:
        config.log_level = args.log_level
    set_config(config)

    logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO),
                        format=LOG_FORMAT)

    try:
        return args.handler(args, config)
    except (PZError, OSError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"✗ Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
