"""
Generate, check and compile a reactive contract from the command line.

Reads a JSON automation config (or, with --source, a hand-edited .sol file),
runs the reactforge pipeline and writes two artifacts into the output
directory:

  - <ContractName>.sol   the generated (or supplied) source
  - <ContractName>.json  {"contractName", "abi", "bytecode"}

Usage:
  python3 scripts/generate_contract.py examples/transfer_relay.json
  python3 scripts/generate_contract.py --source build/TransferRelay.sol
  python3 scripts/generate_contract.py config.json --generate-only -o build
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from reactforge import ConfigError, GenerationError, Pipeline, PipelineSettings

logger = logging.getLogger("generate_contract")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("config", nargs="?", type=Path, help="JSON automation config")
    parser.add_argument("--source", type=Path, help="compile this .sol file instead of generating one")
    parser.add_argument("--contract", help="contract to extract when using --source")
    parser.add_argument("-o", "--out-dir", type=Path, default=Path("build"), help="output directory")
    parser.add_argument("--generate-only", action="store_true", help="stop after generating the source")
    parser.add_argument("--solc-version", help="override REACTFORGE_SOLC_VERSION")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)
    if (args.config is None) == (args.source is None):
        parser.error("pass exactly one of CONFIG or --source")
    if args.generate_only and args.source:
        parser.error("--generate-only needs a CONFIG")
    return args


def write_artifacts(out_dir: Path, contract_name: str, source: str, abi=None, bytecode=None) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    sol_path = out_dir / f"{contract_name}.sol"
    sol_path.write_text(source, encoding="utf-8")
    logger.info("Wrote %s", sol_path)
    if abi is not None:
        json_path = out_dir / f"{contract_name}.json"
        json_path.write_text(
            json.dumps({"contractName": contract_name, "abi": abi, "bytecode": bytecode}, indent=2),
            encoding="utf-8",
        )
        logger.info("Wrote %s", json_path)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = PipelineSettings.from_env()
    if args.solc_version:
        settings = settings.model_copy(update={"solc_version": args.solc_version})
    pipeline = Pipeline(settings)

    if args.generate_only:
        raw = json.loads(args.config.read_text(encoding="utf-8"))
        try:
            generated = pipeline.generate(raw)
        except (ConfigError, GenerationError) as e:
            logger.error("%s", e)
            return 1
        write_artifacts(args.out_dir, generated.contract_name, generated.text)
        return 0

    if args.source:
        result = pipeline.run_source(args.source.read_text(encoding="utf-8"), args.contract)
    else:
        result = pipeline.run(json.loads(args.config.read_text(encoding="utf-8")))

    for warning in result.warnings:
        logger.warning("%s", warning)
    if not result.ok:
        logger.error("%s stage failed: %s", result.stage.value, result.detail)
        for error in result.errors:
            logger.error("  %s", error)
        for message in result.diagnostics:
            logger.debug("%s", message)
        return 1

    write_artifacts(args.out_dir, result.contract_name, result.source, result.abi, result.bytecode)
    return 0


if __name__ == "__main__":
    sys.exit(main())
