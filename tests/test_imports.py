"""
Smoke tests to verify all modules can be imported.
"""

def test_import_ledger():
    import ledger
    assert hasattr(ledger, '__version__')


def test_import_contract():
    import contract
    assert hasattr(contract, '__version__')


def test_import_admin():
    import admin
    assert hasattr(admin, '__version__')


def test_import_cli_app():
    from admin.cli import app
    assert app is not None
