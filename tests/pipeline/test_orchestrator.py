import pytest

from reactforge.errors import CompilationError, ConfigError, GenerationError
from reactforge.pipeline.config_validator import ConfigValidator
from reactforge.pipeline.generator import ContractGenerator
from reactforge.pipeline.orchestrator import Pipeline
from reactforge.types import CompilationArtifact, Diagnostic, GeneratedSource, Stage

ABI = [
    {"type": "function", "name": "react", "inputs": [], "outputs": [], "stateMutability": "nonpayable"},
    {"type": "function", "name": "subscribe", "inputs": [], "outputs": [], "stateMutability": "nonpayable"},
]


class FakeCompiler:
    """Stands in for CompilationAdapter"""

    def __init__(self, error=None, warnings=()):
        self.error = error
        self.warnings = list(warnings)
        self.calls = []

    def compile(self, source, target_contract_name, timeout=None):
        self.calls.append((source, target_contract_name))
        if self.error is not None:
            raise self.error
        return CompilationArtifact(
            contract_name=target_contract_name,
            abi=ABI,
            bytecode="6080",
            compiler_version="0.8.23",
            warnings=self.warnings,
        )


class BrokenGenerator(ContractGenerator):
    """Produces source without any subscription call"""

    def generate(self, config):
        generated = super().generate(config)
        return GeneratedSource(
            text=generated.text.replace("service.subscribe(", "service.noop("),
            contract_name=generated.contract_name,
            template_id=generated.template_id,
        )


class FailingGenerator:
    def generate(self, config):
        raise GenerationError("Duplicate topic-0: pairs 0 and 1")


@pytest.fixture
def compiler():
    return FakeCompiler()


# --- run ------------------------------------------------------------------------

def test_run_success(transfer_config, compiler):
    result = Pipeline(compiler=compiler).run(transfer_config)

    assert result.ok
    assert result.status == "success"
    assert result.contract_name == "ReactiveContract"
    assert result.abi == ABI
    assert result.bytecode == "6080"
    assert result.warnings == []
    assert compiler.calls == [(result.source, "ReactiveContract")]


def test_run_config_failure_does_not_generate(compiler):
    result = Pipeline(generator=FailingGenerator(), compiler=compiler).run({"pairs": []})

    assert not result.ok
    assert result.stage is Stage.CONFIG
    assert any(error.startswith("pairs:") for error in result.errors)
    assert result.source is None
    assert compiler.calls == []


def test_run_generation_failure(transfer_config, compiler):
    result = Pipeline(generator=FailingGenerator(), compiler=compiler).run(transfer_config)
    assert result.stage is Stage.GENERATION
    assert result.errors == ["Duplicate topic-0: pairs 0 and 1"]
    assert compiler.calls == []


def test_run_duplicate_topic_is_a_generation_failure(two_pair_config, compiler):
    two_pair_config["pairs"][1]["event"] = two_pair_config["pairs"][0]["event"]
    result = Pipeline(compiler=compiler).run(two_pair_config)
    assert result.stage is Stage.GENERATION
    assert "Duplicate topic-0" in result.detail


def test_run_treats_structural_findings_as_warnings(transfer_config, compiler):
    result = Pipeline(generator=BrokenGenerator(), compiler=compiler).run(transfer_config)

    assert result.ok
    assert "[subscriptions] No event subscriptions found" in result.warnings
    assert len(compiler.calls) == 1


def test_run_source_treats_the_same_defect_as_fatal(transfer_config, compiler):
    broken = BrokenGenerator().generate(ConfigValidator.validate(transfer_config)).text
    result = Pipeline(compiler=compiler).run_source(broken)

    assert not result.ok
    assert result.stage is Stage.STRUCTURAL
    assert result.errors == ["[subscriptions] No event subscriptions found"]
    assert result.source == broken
    assert compiler.calls == []


def test_run_gas_limit_outside_envelope_only_warns(transfer_config, compiler):
    transfer_config["callbackGasLimit"] = 50_000
    result = Pipeline(compiler=compiler).run(transfer_config)

    assert result.ok
    assert result.warnings == [
        "[gas-limit] Gas limit 50000 is outside recommended range (100000-3000000)"
    ]


def test_run_compilation_failure(transfer_config):
    diagnostics = [
        Diagnostic(severity="warning", type="Warning", message="Unreachable code."),
        Diagnostic(severity="error", type="TypeError", message="Wrong argument count.", line=9,
                   formatted_message="TypeError: Wrong argument count.\n --> Contract.sol:9:5:"),
    ]
    error = CompilationError("1 compiler error(s)", diagnostics=diagnostics)
    result = Pipeline(compiler=FakeCompiler(error=error)).run(transfer_config)

    assert result.stage is Stage.COMPILATION
    assert result.kind == "diagnostics"
    assert result.errors == ["TypeError (line 9): Wrong argument count."]
    assert result.warnings == ["Warning: Unreachable code."]
    assert "contract ReactiveContract" in result.source
    assert result.diagnostics == [
        "Unreachable code.",
        "TypeError: Wrong argument count.\n --> Contract.sol:9:5:",
    ]


def test_run_compilation_timeout(transfer_config):
    error = CompilationError("solc 0.8.23 did not finish within 1s", kind=CompilationError.TIMEOUT)
    result = Pipeline(compiler=FakeCompiler(error=error)).run(transfer_config)
    assert result.stage is Stage.COMPILATION
    assert result.kind == "timeout"
    assert result.errors == ["solc 0.8.23 did not finish within 1s"]


def test_compiler_warnings_are_reported(transfer_config):
    warning = Diagnostic(severity="warning", type="Warning", message="Function state mutability can be restricted.")
    result = Pipeline(compiler=FakeCompiler(warnings=[warning])).run(transfer_config)
    assert result.ok
    assert result.warnings == ["Warning: Function state mutability can be restricted."]


def test_runs_are_independent(transfer_config, two_pair_config, compiler):
    pipeline = Pipeline(compiler=compiler)
    first = pipeline.run(transfer_config)
    pipeline.run(two_pair_config)
    again = pipeline.run(transfer_config)
    assert first == again


# --- run_source -------------------------------------------------------------------

def test_run_source_uses_declared_contract_name(transfer_config, compiler):
    transfer_config["contractName"] = "TransferRelay"
    source = Pipeline().generate(transfer_config).text
    result = Pipeline(compiler=compiler).run_source(source)

    assert result.ok
    assert compiler.calls == [(source, "TransferRelay")]


def test_run_source_explicit_contract_name(transfer_config, compiler):
    source = Pipeline().generate(transfer_config).text
    Pipeline(compiler=compiler).run_source(source, contract_name="AbstractReactive")
    assert compiler.calls[0][1] == "AbstractReactive"


def test_run_source_missing_target(transfer_config):
    source = Pipeline().generate(transfer_config).text
    error = CompilationError("Contract 'Nope' not found", kind=CompilationError.MISSING_CONTRACT)
    result = Pipeline(compiler=FakeCompiler(error=error)).run_source(source, "Nope")
    assert result.stage is Stage.COMPILATION
    assert result.kind == "missing-contract"


# --- generate ---------------------------------------------------------------------

def test_generate_only(transfer_config, compiler):
    generated = Pipeline(compiler=compiler).generate(transfer_config)
    assert generated.template_id == "basic-single-pair"
    assert compiler.calls == []


def test_generate_propagates_stage_errors():
    with pytest.raises(ConfigError):
        Pipeline().generate({})
