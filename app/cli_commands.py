"""
Flask CLI commands for database management.

Commands:
- flask init-db: Create the schema
- flask seed-demo: Insert a demo campaign, store, school, parent and products
"""

from decimal import Decimal

import click
from app.database import get_session, create_schema
from app.models import Campaign, Store, School, Profile, Product, UserRole

DEMO_PRODUCTS = [
    ('Ballotin Pralinés 250g', Decimal('15.90')),
    ('Oursons Guimauve', Decimal('5.00')),
    ('Tablette Noir 70%', Decimal('3.50')),
]


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create every table."""
        create_schema()
        click.echo(click.style('✅ Schéma créé.', fg='green'))

    @app.cli.command('seed-demo')
    @click.option('--parent-email', default='parent@example.com', help='Email of the demo parent')
    @click.option('--margin', default=20, type=click.IntRange(0, 100), help='Campaign margin in percent')
    def seed_demo(parent_email, margin):
        """Insert demo data for a local shop."""
        db_session = get_session()
        if db_session.query(Profile).filter_by(email=parent_email).first():
            click.echo(click.style(f'❌ Un profil existe déjà pour {parent_email}', fg='red'))
            return

        try:
            campaign = Campaign(name='Campagne de Pâques', margin_percentage=margin)
            store = Store(name='Jeff de Bruges Centre', city='Paris')
            db_session.add_all([campaign, store])
            db_session.flush()

            school = School(
                name='École Jules Ferry',
                store_id=store.id,
                margin_explanation=f'{margin}% de chaque commande financent la classe verte.'
            )
            db_session.add(school)
            db_session.flush()

            parent = Profile(
                name='Parent Démo',
                email=parent_email,
                role=UserRole.PARENT.value,
                school_id=school.id
            )
            db_session.add(parent)
            for name, price in DEMO_PRODUCTS:
                db_session.add(Product(name=name, price=price, campaign_id=campaign.id))
            db_session.commit()

            click.echo(click.style('\n✅ Données de démonstration créées !', fg='green', bold=True))
            click.echo(f'   Parent: {parent_email} (id {parent.id})')
            click.echo(f'   École: {school.name}')

        except Exception as e:
            db_session.rollback()
            click.echo(click.style(f'❌ Erreur lors de la création : {str(e)}', fg='red'))
