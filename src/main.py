"""
Command line tools for the LOCADZ marketplace.
"""
import click
from typing import Optional

from .supabase_sync.supabase_client import SupabaseClient
from .supabase_sync.local_store import LocalStore
from .api.services.admin_service import AdminService
from .utils.errors import RemoteServiceError
from .utils.logger import setup_logger, SyncLogger
from .utils.pricing import calculate_pricing, format_currency
from config.settings import app_config

# Replay order keeps foreign keys satisfied (users before the rows that reference them)
SYNC_COLLECTIONS = (
    (app_config.users_collection, "email"),
    (app_config.properties_collection, "id"),
    (app_config.bookings_collection, "id"),
    (app_config.messages_collection, "id"),
    (app_config.payout_settings_collection, "host_id"),
)


class LocalSync:
    """Pushes records written to the local fallback store back into Supabase."""

    def __init__(self, log_level: str = "INFO", log_file: Optional[str] = None,
                 supabase_client: Optional[SupabaseClient] = None, local_store: Optional[LocalStore] = None):
        self.logger = setup_logger("locadz_sync", log_level, log_file)
        self.sync_logger = SyncLogger(self.logger)
        self.supabase_client = supabase_client or SupabaseClient()
        self.local_store = local_store or LocalStore()

    def sync(self, dry_run: bool = False) -> dict:
        """
        Replay every local record that Supabase does not have yet.

        Records already present remotely, or inserted successfully, are removed
        from the local store. Failed inserts stay local for the next run.

        Args:
            dry_run: If True, report what would be synced without writing

        Returns:
            The SyncLogger statistics
        """
        self.sync_logger.reset_stats()
        if not self.supabase_client.initialize():
            raise click.ClickException("Supabase is not configured; nothing can be synced")

        for collection, key in SYNC_COLLECTIONS:
            for record in self.local_store.all(collection):
                value = record.get(key)
                try:
                    if self.supabase_client.select_one(collection, {key: value}, columns=key):
                        self.sync_logger.log_skipped(collection, str(value), "already remote")
                        if not dry_run:
                            self.local_store.remove(collection, key, value)
                        continue
                    if dry_run:
                        self.sync_logger.log_skipped(collection, str(value), "dry run")
                        continue
                    self.supabase_client.insert(collection, record)
                    self.local_store.remove(collection, key, value)
                    self.sync_logger.log_synced(collection, str(value))
                except RemoteServiceError as e:
                    self.sync_logger.log_error(e, context=f"{collection}:{value}")

        return dict(self.sync_logger.stats)


@click.group()
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              default='INFO', help='Logging level')
@click.option('--log-file', type=str, help='Log file path (optional)')
@click.pass_context
def cli(ctx, log_level, log_file):
    """LOCADZ marketplace tools."""
    ctx.ensure_object(dict)
    ctx.obj['log_level'] = log_level
    ctx.obj['log_file'] = log_file


@cli.command()
@click.option('--price', type=float, required=True, help='Price per night (DA)')
@click.option('--nights', type=int, required=True, help='Number of nights')
def quote(price, nights):
    """Price a stay under the platform fee model."""
    try:
        pricing = calculate_pricing(price, nights)
    except ValueError as e:
        raise click.BadParameter(str(e))

    click.echo(f"Base ({nights} nights): {format_currency(pricing.base)}")
    click.echo(f"Client service fee: {format_currency(pricing.service_fee_client)}")
    click.echo(f"Traveler pays: {format_currency(pricing.total_client)}")
    click.echo(f"Host commission: {format_currency(pricing.host_commission)}")
    click.echo(f"Host receives: {format_currency(pricing.payout_host)}")
    click.echo(f"Platform revenue: {format_currency(pricing.platform_revenue)}")


@cli.command()
@click.pass_context
def stats(ctx):
    """Show booking volume and commission over approved and paid stays."""
    setup_logger("locadz", ctx.obj['log_level'], ctx.obj['log_file'])
    stats_data = AdminService().platform_stats()
    if 'error' in stats_data:
        click.echo(f"Error: {stats_data['error']}")
        ctx.exit(1)

    click.echo("Platform Statistics:")
    click.echo(f"  Confirmed bookings: {stats_data['count']}")
    click.echo(f"  Total volume: {format_currency(stats_data['total_volume'])}")
    click.echo(f"  Total commission: {format_currency(stats_data['total_commission'])}")


@cli.command('sync-local')
@click.option('--dry-run', is_flag=True, help='Report what would be synced without writing')
@click.pass_context
def sync_local(ctx, dry_run):
    """Replay records saved in the local fallback store into Supabase."""
    syncer = LocalSync(ctx.obj['log_level'], ctx.obj['log_file'])
    syncer.sync(dry_run=dry_run)
    syncer.sync_logger.print_summary()
    if dry_run:
        click.echo("⚠️  DRY RUN MODE - No data was actually synced to database")


@cli.command()
@click.option('--host', type=str, default=None, help='Bind address')
@click.option('--port', type=int, default=None, help='Port')
@click.option('--reload', is_flag=True, help='Auto-reload on code changes')
def serve(host, port, reload):
    """Run the HTTP API with uvicorn."""
    import uvicorn
    from .api.config import settings

    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    cli()
