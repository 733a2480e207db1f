# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Plan the clang-tidy invocations attached to C/C++ targets.

Each target yields a small list of :class:`~tidylint.models.LintAction`
objects. A regular run lints twice, once for the human readable report and
once for the machine report; fix mode replaces the human pass with a patch
computing pass. Targets without lintable sources still get a no-op action so
that every target produces the same set of output files.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Final

from .config import LintOptions, TidyLintConfig
from .headers import aggregate_regex
from .models import (
    LINT_GENFILES_TAG,
    CompilationContext,
    LintAction,
    LintOutputs,
    LintTarget,
    PatchConfig,
    ReportOutputs,
    SourceFile,
)
from .toolchain import compile_flags

MNEMONIC: Final[str] = "ClangTidy"
OUTFILE_FORMAT: Final[str] = "{label}.{mnemonic}.{suffix}"

STDOUT_ENV: Final[str] = "CLANG_TIDY__STDOUT_STDERR_OUTPUT_FILE"
EXIT_CODE_ENV: Final[str] = "CLANG_TIDY__EXIT_CODE_OUTPUT_FILE"
VERBOSE_ENV: Final[str] = "CLANG_TIDY__VERBOSE"
TIMEOUT_ENV: Final[str] = "CLANG_TIDY__TIMEOUT"
PATCHER_STDOUT_ENV: Final[str] = "PATCHER__STDOUT_OUTPUT_FILE"
PATCHER_EXIT_CODE_ENV: Final[str] = "PATCHER__EXIT_CODE_OUTPUT_FILE"
PATCHER_SILENT_ENV: Final[str] = "PATCHER__SILENT_ON_SUCCESS"


def filter_srcs(target: LintTarget) -> list[SourceFile]:
    """Return the sources of ``target`` that should be linted.

    Headers and generated files are skipped unless the target opts in with the
    ``lint-genfiles`` tag, in which case every source is returned.
    """

    if LINT_GENFILES_TAG in target.tags:
        return list(target.srcs)
    return [src for src in target.srcs if src.is_lintable]


def _prefixed(values: Iterable[str], prefix: str) -> list[str]:
    args: list[str] = []
    for value in values:
        args.extend((prefix, value))
    return args


def _angle_includes_option(config: TidyLintConfig) -> str:
    return "-isystem" if config.aspect.angle_includes_are_system else "-I"


def _header_filter(context: CompilationContext, config: TidyLintConfig) -> str | None:
    if config.aspect.lint_target_headers:
        return aggregate_regex(context.direct_headers)
    return config.aspect.header_filter or None


def build_args(target: LintTarget, srcs: Sequence[SourceFile], config: TidyLintConfig) -> list[str]:
    """Return the clang-tidy arguments for linting ``srcs`` of ``target``.

    The layout is ``[--config-file=..] [-header-filter=..] <srcs> -- <flags>``
    where the flags after ``--`` describe how the sources are compiled.

    Args:
        target: Target owning the sources.
        srcs: Non-empty list of sources to lint; the first one picks the language.
        config: Resolved tidylint configuration.

    Returns:
        list[str]: Arguments following the clang-tidy executable.
    """

    context = target.compilation_context or CompilationContext()
    args: list[str] = []
    if global_config := config.aspect.global_config_file:
        args.append(f"--config-file={global_config}")
    if regex := _header_filter(context, config):
        args.append(f"-header-filter={regex}")
    args.extend(src.path for src in srcs)

    args.append("--")
    args.extend(
        compile_flags(target, config.toolchain, cxx=srcs[0].is_cxx, verbose=config.aspect.verbose),
    )
    args.extend(f"-D{define}" for define in context.defines)
    args.extend(f"-D{define}" for define in context.local_defines)
    args.extend(_prefixed(context.framework_includes, "-F"))
    args.extend(_prefixed(context.includes, "-I"))
    args.extend(_prefixed(context.quote_includes, "-iquote"))
    args.extend(_prefixed(context.system_includes, _angle_includes_option(config)))
    args.extend(_prefixed(context.external_includes, "-isystem"))
    return args


def gather_inputs(target: LintTarget, srcs: Sequence[SourceFile], config: TidyLintConfig) -> list[str]:
    """Return every file clang-tidy may read while linting ``srcs``."""

    context = target.compilation_context or CompilationContext()
    inputs = [src.path for src in srcs]
    inputs.extend(config.aspect.configs)
    inputs.extend(context.headers)
    if global_config := config.aspect.global_config_file:
        inputs.append(global_config)
    return list(dict.fromkeys(inputs))


def _declare(output_dir: Path, target: LintTarget, mnemonic: str, suffix: str) -> Path:
    filename = OUTFILE_FORMAT.format(label=target.name, mnemonic=mnemonic, suffix=suffix)
    return output_dir / target.package / filename


def output_files(mnemonic: str, target: LintTarget, options: LintOptions, output_dir: Path) -> LintOutputs:
    """Declare the human and machine report files for ``target``.

    Args:
        mnemonic: Linter name embedded in the file names.
        target: Target being linted.
        options: Run-wide options; ``fail_on_violation`` drops the human exit code
            so that findings fail the human report action.
        output_dir: Directory receiving the files.

    Returns:
        LintOutputs: Declared output files.
    """

    human_exit_code = None
    if not options.fail_on_violation:
        human_exit_code = _declare(output_dir, target, mnemonic, "out.exit_code")
    return LintOutputs(
        human=ReportOutputs(out=_declare(output_dir, target, mnemonic, "out"), exit_code=human_exit_code),
        machine=ReportOutputs(
            out=_declare(output_dir, target, mnemonic, "report"),
            exit_code=_declare(output_dir, target, mnemonic, "report.exit_code"),
        ),
    )


def patch_and_output_files(mnemonic: str, target: LintTarget, options: LintOptions, output_dir: Path) -> LintOutputs:
    """Declare the report files plus the patch file produced in fix mode."""

    outputs = output_files(mnemonic, target, options, output_dir)
    human = ReportOutputs(
        out=outputs.human.out,
        exit_code=outputs.human.exit_code or _declare(output_dir, target, mnemonic, "out.exit_code"),
    )
    return LintOutputs(
        human=human,
        machine=outputs.machine,
        patch=_declare(output_dir, target, mnemonic, "patch"),
    )


def _progress_message(target: LintTarget) -> str:
    return f"Linting {target.label} with clang-tidy"


def clang_tidy_action(
    target: LintTarget,
    srcs: Sequence[SourceFile],
    report: ReportOutputs,
    config: TidyLintConfig,
) -> LintAction:
    """Plan a report-only clang-tidy run.

    Args:
        target: Target owning ``srcs``.
        srcs: Sources to lint.
        report: Report file and optional exit-code file. Without an exit-code
            file a non-zero clang-tidy exit fails the action.
        config: Resolved tidylint configuration.

    Returns:
        LintAction: The planned invocation of the clang-tidy wrapper.
    """

    outputs = [report.out]
    env = {STDOUT_ENV: str(report.out)}
    if report.exit_code is not None:
        env[EXIT_CODE_ENV] = str(report.exit_code)
        outputs.append(report.exit_code)
    if config.execution.timeout is not None:
        env[TIMEOUT_ENV] = str(config.execution.timeout)
    if config.aspect.verbose:
        env[VERBOSE_ENV] = "1"

    return LintAction(
        mnemonic=MNEMONIC,
        kind="lint",
        target=target.label,
        command=(*config.execution.wrapper, config.aspect.binary, *build_args(target, srcs, config)),
        env=env,
        inputs=tuple(gather_inputs(target, srcs, config)),
        outputs=tuple(outputs),
        exit_code_outputs=(report.exit_code,) if report.exit_code is not None else (),
        progress_message=_progress_message(target),
    )


def clang_tidy_fix(
    target: LintTarget,
    srcs: Sequence[SourceFile],
    patch: Path,
    report: ReportOutputs,
    config: TidyLintConfig,
) -> LintAction:
    """Plan a clang-tidy ``--fix`` run that records the fixes as a patch.

    The linter invocation is serialised into a :class:`PatchConfig` document;
    the patcher helper runs it, diffs the touched sources and restores them.

    Args:
        target: Target owning ``srcs``.
        srcs: Sources to lint and diff.
        patch: Output file receiving the unified diff.
        report: Report file and exit-code file for the linter output.
        config: Resolved tidylint configuration.

    Returns:
        LintAction: The planned invocation of the patcher helper.
    """

    if report.exit_code is None:
        raise ValueError("fix actions capture the linter exit code; declare it with patch_and_output_files")

    patch_cfg_path = config.execution.output_dir / target.package / f"_{target.name}.patch_cfg"
    env: dict[str, str] = {}
    if config.aspect.verbose:
        env[VERBOSE_ENV] = "1"

    wrapper_head, *wrapper_args = config.execution.wrapper
    patch_config = PatchConfig(
        linter=wrapper_head,
        args=(*wrapper_args, config.aspect.binary, "--fix", *build_args(target, srcs, config)),
        env=env,
        files_to_diff=tuple(src.path for src in srcs),
        output=str(patch),
        timeout=config.execution.timeout,
    )

    return LintAction(
        mnemonic=MNEMONIC,
        kind="fix",
        target=target.label,
        command=(*config.execution.patcher, str(patch_cfg_path)),
        env={
            PATCHER_EXIT_CODE_ENV: str(report.exit_code),
            PATCHER_STDOUT_ENV: str(report.out),
            PATCHER_SILENT_ENV: "1",
        },
        inputs=(*gather_inputs(target, srcs, config), str(patch_cfg_path)),
        outputs=(patch, report.out, report.exit_code),
        exit_code_outputs=(report.exit_code,),
        patch_config=patch_config,
        patch_config_path=patch_cfg_path,
        progress_message=_progress_message(target),
    )


def noop_lint_action(target: LintTarget, outputs: LintOutputs) -> LintAction:
    """Plan an action that only materialises the declared outputs."""

    exit_codes = [outputs.human.exit_code, outputs.machine.exit_code]
    return LintAction(
        mnemonic=MNEMONIC,
        kind="noop",
        target=target.label,
        outputs=tuple(outputs.files()),
        exit_code_outputs=tuple(path for path in exit_codes if path is not None),
        progress_message=f"No sources to lint in {target.label}",
    )


def declare_outputs(target: LintTarget, config: TidyLintConfig) -> LintOutputs:
    """Return the outputs ``target`` produces under the current options."""

    declare = patch_and_output_files if config.options.fix else output_files
    return declare(MNEMONIC, target, config.options, config.execution.output_dir)


def plan_target(target: LintTarget, config: TidyLintConfig) -> list[LintAction]:
    """Return the lint actions for a single target.

    Args:
        target: Target metadata.
        config: Resolved tidylint configuration.

    Returns:
        list[LintAction]: Empty for non C/C++ targets, a single no-op action for
        targets without lintable sources, otherwise the human (or fix) action
        followed by the machine report action.
    """

    if not target.is_cc:
        return []

    files_to_lint = filter_srcs(target)
    outputs = declare_outputs(target, config)
    if not files_to_lint:
        return [noop_lint_action(target, outputs)]

    actions: list[LintAction] = []
    if outputs.patch is not None:
        actions.append(clang_tidy_fix(target, files_to_lint, outputs.patch, outputs.human, config))
    else:
        actions.append(clang_tidy_action(target, files_to_lint, outputs.human, config))

    # The machine report is produced by a separate pass even in fix mode.
    actions.append(clang_tidy_action(target, files_to_lint, outputs.machine, config))
    return actions


def plan_targets(targets: Iterable[LintTarget], config: TidyLintConfig) -> list[LintAction]:
    """Return the lint actions for every target in ``targets``."""

    actions: list[LintAction] = []
    for target in targets:
        actions.extend(plan_target(target, config))
    return actions


__all__ = [
    "EXIT_CODE_ENV",
    "MNEMONIC",
    "PATCHER_EXIT_CODE_ENV",
    "PATCHER_SILENT_ENV",
    "PATCHER_STDOUT_ENV",
    "STDOUT_ENV",
    "TIMEOUT_ENV",
    "VERBOSE_ENV",
    "build_args",
    "clang_tidy_action",
    "clang_tidy_fix",
    "declare_outputs",
    "filter_srcs",
    "gather_inputs",
    "noop_lint_action",
    "output_files",
    "patch_and_output_files",
    "plan_target",
    "plan_targets",
]
