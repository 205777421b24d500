#!/usr/bin/env python3
"""
Custom Task Example - Register your own stage type and run a pipeline from Python.

This example shows how to:
1. Write a Task that returns a TaskResult
2. Register it next to the built-in stage types
3. Attach a success predicate and post-run hooks
4. Execute the pipeline and inspect the run

Run with:
    python examples/custom-task.py
"""

import sys

from stagecoach import (
    EnvironmentBindings,
    HookSet,
    Pipeline,
    PipelineExecutor,
    Stage,
    Task,
    TaskResult,
    build_registry,
    configure_logging,
)

# =============================================================================
# Custom Task: DiskSpaceTask
# =============================================================================


class DiskSpaceTask(Task):
    """
    Report free space on a path.

    Context:
        path: Directory to inspect (default: ".")

    Outputs:
        free_mb: Free space in megabytes
    """

    def execute(self, stage, bindings) -> TaskResult:
        import shutil

        usage = shutil.disk_usage(stage.context.get("path", "."))
        return TaskResult.success(outputs={"free_mb": usage.free // (1024 * 1024)})


def main() -> int:
    configure_logging()

    registry = build_registry()
    registry.register("disk_space", DiskSpaceTask)

    pipeline = Pipeline(
        name="custom-task-example",
        stages=[
            Stage("greet", commands=("echo building {APP} at $COMMIT",)),
            Stage(
                "disk",
                type="disk_space",
                context={"path": "/tmp"},
                predicate=lambda result: result.outputs["free_mb"] > 100,
            ),
        ],
        bindings=EnvironmentBindings({"APP": "demo"}),
        hooks=HookSet(always=[Stage("report", commands=("echo run finished: $RUN_STATUS",))]),
    )

    run = PipelineExecutor(registry=registry).run(pipeline, commit="0000000")

    print(f"\nRun {run.id}: {run.status}")
    for outcome in run.outcomes:
        print(f"  {outcome.name}: {'ok' if outcome.succeeded else outcome.error} {outcome.outputs.get('free_mb', '')}")
    return run.resolve_exit_code()


if __name__ == "__main__":
    sys.exit(main())
