"""
Flask CLI commands.

Commands:
- flask init-db: Create all tables
- flask create-admin: Create a platform admin user
- flask reconcile-batch: Compare realized units against a batch's quantity
"""

import click
from app.database import create_all, get_session
from app.exceptions import WarrantyError
from app.models import UserRole
from app.services.auth_service import create_user
from app.services.batch_service import reconcile_batch


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create database tables that do not exist yet."""
        create_all()
        click.echo(click.style('✅ Database tables created.', fg='green'))

    @app.cli.command('create-admin')
    @click.option('--email', prompt=True, help='Admin email address')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
    @click.option('--name', default='Administrator', help='Full name')
    def create_admin(email, password, name):
        """Create a new admin user."""
        try:
            admin = create_user(get_session(), email, password, name, role=UserRole.ADMIN.value)
        except WarrantyError as e:
            click.echo(click.style(f'❌ {e.message}', fg='red'))
            raise SystemExit(1)

        click.echo(click.style('\n✅ Admin created!', fg='green', bold=True))
        click.echo(f'   Email: {admin.email}')
        click.echo(f'   ID: {admin.id}')

    @app.cli.command('reconcile-batch')
    @click.argument('batch_id', type=int)
    def reconcile_batch_command(batch_id):
        """Report declared vs realized units for a batch."""
        try:
            report = reconcile_batch(get_session(), batch_id)
        except WarrantyError as e:
            click.echo(click.style(f'❌ {e.message}', fg='red'))
            raise SystemExit(1)

        colour = 'green' if report['missing'] == 0 else 'yellow'
        click.echo(click.style(
            f"Batch {report['batch_number']} ({report['status']}): "
            f"{report['realized']}/{report['declared']} units, {report['missing']} missing",
            fg=colour
        ))
        for status, total in report['units_by_status'].items():
            click.echo(f'   {status}: {total}')
