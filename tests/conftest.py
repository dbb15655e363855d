import pytest
import jwt
from datetime import datetime, timedelta
from coffeebeat import create_app, db
from coffeebeat.config import TestingConfig
from coffeebeat.services.local_store import LocalStore

def make_token(role='ROLE_CUSTOMER', email='user@coffee.test', hours=24):
    return jwt.encode({
        'sub': email,
        'role': role,
        'exp': datetime.utcnow() + timedelta(hours=hours)
    }, 'backend-secret', algorithm="HS256")

@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def login_as(app):
    """Store a backend session for a user with the given role."""
    def _login(role, user_id='u-1', email='user@coffee.test'):
        LocalStore.set('token', make_token(role, email))
        LocalStore.set('refreshToken', 'refresh-' + user_id)
        user = {'id': user_id, 'email': email, 'role': role, 'name': 'Test User'}
        LocalStore.set('user', user)
        return user
    return _login
