"""
Integration tests for the CLI commands and the Prometheus endpoint.
"""

from app.models import Product, Profile, School


def test_seed_demo(app, session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['seed-demo', '--parent-email', 'demo@example.com', '--margin', '15'])
    assert result.exit_code == 0
    assert 'demo@example.com' in result.output

    parent = session.query(Profile).filter_by(email='demo@example.com').one()
    assert parent.is_parent()
    assert session.query(School).filter_by(id=parent.school_id).count() == 1
    assert session.query(Product).count() == 3


def test_seed_demo_refuses_existing_profile(app, session, parent):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['seed-demo', '--parent-email', parent.email])
    assert 'existe déjà' in result.output
    assert session.query(Profile).count() == 1


def test_seed_demo_rejects_margin_out_of_range(app, session):
    result = app.test_cli_runner().invoke(args=['seed-demo', '--margin', '120'])
    assert result.exit_code != 0


def test_metrics_exposes_checkout_outcomes(login, parent):
    client = login(parent)
    client.post('/cart/checkout')

    resp = client.get('/metrics')
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert 'checkout_total{outcome="empty"}' in body
    assert 'http_requests_total' in body
