import asyncio
import logging

import click

from deadline.poller import timeout
from deadline.promise import TimeoutPromise
from deadline.timeout_compat import watchdog

from . import async_command

log = logging.getLogger(__name__)


class Report:
    """Collects PASSED/FAILED lines for the scenario currently running."""

    def __init__(self):
        self.current = None
        self.failures = []

    def passed(self, message):
        click.echo("PASSED: " + message)

    def failed(self, message):
        self.failures.append((self.current, message))
        click.echo("FAILED: " + message)

    def rejected(self, reason):
        click.echo("The Promise was rejected with the following message:")
        click.echo('"{}"'.format(reason))


async def check_timeout(report):
    timed_out = False

    def on_timeout(state):
        nonlocal timed_out
        timed_out = True
        report.passed("Timed-out as expected.")

    await timeout(lambda state: False, on_timeout, 1)

    if not timed_out:
        report.failed("Failed to time-out.")


async def check_cancel_timeout(report):
    timed_out = False

    def on_timeout(state):
        nonlocal timed_out
        timed_out = True
        report.failed("Timed-out")

    await timeout(lambda state: True, on_timeout, 10)

    if not timed_out:
        report.passed("Completed without timing-out.")


async def check_cancel_function_error(report):
    def cancel(state):
        raise RuntimeError("TEST")

    try:
        await timeout(cancel, lambda state: report.failed("Timed-out."), 1)
    except RuntimeError as e:
        if str(e) == "TEST":
            report.passed("TEST error captured")
        else:
            report.failed("Unexpected error.")
    else:
        report.failed("Error was not raised.")


async def check_timeout_function_error(report):
    def on_timeout(state):
        raise RuntimeError("TEST")

    try:
        await timeout(lambda state: False, on_timeout, 1)
    except RuntimeError as e:
        if str(e) == "TEST":
            report.passed("TEST error captured")
        else:
            report.failed("Unexpected error.")
    else:
        report.failed("Error was not raised.")


async def check_timeout_promise(report):
    async def executor(resolve, reject):
        click.echo("Sleeping for 1 second")
        await asyncio.sleep(1)
        click.echo("Resolving")
        resolve("success")

    def on_rejected(reason):
        report.failed(str(reason))
        report.rejected(reason)

    # a timeout WILL be raised as a rejection that must be handled here or by the caller
    await TimeoutPromise(executor, 5).then(lambda value: report.passed("The promise resolved before the timeout.")).catch(
        on_rejected
    )


async def check_timeout_promise_timeout(report):
    def on_rejected(reason):
        if getattr(reason, "is_timeout_exception", False):
            report.passed("The Promise timed-out.")
        else:
            report.failed("Unexpected error.")
        report.rejected(reason)

    await TimeoutPromise(lambda resolve, reject: None, 0.5).then(
        lambda value: report.failed("The promise resolved without timing-out.")
    ).catch(on_rejected)


SCENARIOS = [
    ("timeout", check_timeout),
    ("cancel_timeout", check_cancel_timeout),
    ("timeout_cancel_function_error", check_cancel_function_error),
    ("timeout_timeout_function_error", check_timeout_function_error),
    ("timeout_promise", check_timeout_promise),
    ("timeout_promise_timeout", check_timeout_promise_timeout),
]

SCENARIO_NAMES = [name for name, _ in SCENARIOS]


async def run_scenarios(scenarios, watchdog_seconds):
    """Run scenarios in order. Returns the Report."""
    report = Report()

    for name, scenario in scenarios:
        report.current = name
        click.echo('Starting test "{}"'.format(name))

        cm = watchdog(watchdog_seconds)
        try:
            async with cm:
                await scenario(report)
        except Exception as e:
            if cm.expired:
                report.failed("Did not complete within {}s".format(watchdog_seconds))
            else:
                log.debug("Scenario {} raised".format(name), exc_info=True)
                report.failed("Unexpected error: {} {}".format(e.__class__.__name__, e))

        click.echo('Completed test "{}"'.format(name))
        click.echo("")

    return report


@click.command()
@click.option(
    "--only", "only", multiple=True, type=click.Choice(SCENARIO_NAMES), help="Run only the named scenario(s)."
)
@click.option("--list", "list_only", is_flag=True, help="List scenario names and exit.")
@click.option(
    "--watchdog",
    "watchdog_seconds",
    envvar="DEADLINE_WATCHDOG",
    type=click.FloatRange(min=0, min_open=True),
    default=30.0,
    show_default=True,
    help="Fail a scenario that has not finished after this many seconds.",
)
@click.pass_context
@async_command
async def selfcheck(ctx, only, list_only, watchdog_seconds):
    """Run the built-in timeout scenarios and print PASSED/FAILED lines."""
    if list_only:
        for name in SCENARIO_NAMES:
            click.echo(name)
        return

    scenarios = [(name, fn) for name, fn in SCENARIOS if not only or name in only]
    report = await run_scenarios(scenarios, watchdog_seconds)

    if report.failures:
        click.echo("{} of {} scenarios failed".format(len({n for n, _ in report.failures}), len(scenarios)), err=True)
        ctx.exit(1)
