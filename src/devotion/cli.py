"""Command line entry point for Devotion."""

from __future__ import annotations

import click

from .config import BaseConfig
from .errors import DevotionError
from .infra.database import bootstrap_database
from .infra.repositories import (
    SQLModelHabitRepository,
    SQLModelPartnershipRepository,
    SQLModelTransactionRepository,
)
from .logging_config import setup_logging
from .models.enums import Role


class _AppState:
    """Lazily bootstrapped config and session factory shared by commands."""

    def __init__(self) -> None:
        self.config = BaseConfig()
        self._session_factory = None

    @property
    def session_factory(self):
        if self._session_factory is None:
            setup_logging(self.config)
            _engine, self._session_factory = bootstrap_database(self.config)
        return self._session_factory


pass_state = click.make_pass_decorator(_AppState, ensure=True)


@click.group()
def cli() -> None:
    """Points ledger and reward/punishment settlement for partnered profiles."""


@cli.command("init-db")
@pass_state
def init_db(state: _AppState) -> None:
    """Create the database schema."""

    _ = state.session_factory
    click.echo(f"Database ready: {state.config.DATABASE_URL}")


@cli.command("create-profile")
@click.argument("display_name")
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.SUBMISSIVE.value,
    show_default=True,
)
@click.option("--color", "theme_color", default=None, help="Theme colour, e.g. #ff66aa")
@pass_state
def create_profile(state: _AppState, display_name: str, role: str, theme_color: str | None) -> None:
    """Create a profile and print its id."""

    from .services.partnerships import create_profile as _create

    try:
        profile = _create(
            display_name=display_name,
            role=role,
            theme_color=theme_color,
            session_factory=state.session_factory,
        )
    except DevotionError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created profile {profile.id} ({profile.display_name}, {profile.role.value})")


@cli.command()
@click.argument("user_id", type=int)
@pass_state
def balance(state: _AppState, user_id: int) -> None:
    """Print a profile's points balance."""

    repo = SQLModelTransactionRepository(state.session_factory)
    click.echo(str(repo.balance(user_id=user_id)))


@cli.command()
@click.argument("user_id", type=int)
@click.option("--limit", default=20, show_default=True, type=click.IntRange(min=1))
@pass_state
def history(state: _AppState, user_id: int, limit: int) -> None:
    """List a profile's most recent transactions."""

    repo = SQLModelTransactionRepository(state.session_factory)
    rows = repo.list_all(user_id=user_id, limit=limit)
    if not rows:
        click.echo("No transactions.")
        return
    for txn in rows:
        click.echo(
            f"{txn.created_at:%Y-%m-%d %H:%M}  {txn.points:+6d}  {txn.type.value:<11} {txn.reason}"
        )


@cli.command()
@click.argument("user_id", type=int)
@pass_state
def stats(state: _AppState, user_id: int) -> None:
    """Show balance and habit progress for a profile."""

    from .services.stats import partner_stats

    partners = SQLModelPartnershipRepository(state.session_factory)
    profile = partners.get_profile(user_id)
    if profile is None:
        raise click.ClickException(f"Profile {user_id} not found")

    summary = partner_stats(
        user_id,
        transactions=SQLModelTransactionRepository(state.session_factory),
        habits=SQLModelHabitRepository(state.session_factory),
    )
    partner_id = partners.partner_of(user_id=user_id)
    click.echo(f"{profile.display_name} ({profile.role.value})")
    click.echo(f"  partner:      {partner_id if partner_id is not None else '-'}")
    click.echo(f"  balance:      {summary.balance}")
    click.echo(f"  earned/spent: {summary.earned}/{summary.spent}")
    click.echo(
        f"  today:        {summary.completions_today}/{summary.habits_assigned} "
        f"({summary.completion_rate:.0f}%)"
    )
    click.echo(f"  completions:  {summary.total_completions}")


@cli.command("seed-demo")
@pass_state
def seed_demo(state: _AppState) -> None:
    """Seed a demo couple with habits, rewards and a shared task."""

    from .services.demo_seed import run_demo_seed

    click.echo("Seeding demo data...")
    summary = run_demo_seed(state.session_factory)
    click.echo(
        f"Demo data ready ({summary.profiles} profiles, {summary.habits} habits, "
        f"{summary.transactions} transactions)"
    )


def main() -> None:  # pragma: no cover - console script
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
