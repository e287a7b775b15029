"""
Unit Tests for Auth API Endpoints
Tests for: register, login, current user, token handling
"""
import pytest
from datetime import timedelta
from httpx import AsyncClient
from faker import Faker

from sharexconnect.core.security import create_access_token, create_refresh_token

fake = Faker()


def registration_payload(**overrides) -> dict:
    payload = {
        'username': fake.user_name()[:20] + fake.numerify('###'),
        'email': fake.unique.email(),
        'password': 'SecurePassword123',
        'first_name': fake.first_name(),
        'last_name': fake.last_name(),
        'institution': 'State University',
    }
    payload.update(overrides)
    return payload


class TestRegister:
    """Test user registration endpoint"""

    @pytest.mark.asyncio
    async def test_register_student(self, client: AsyncClient):
        """Test registering with valid data"""
        payload = registration_payload()

        response = await client.post('/api/v1/auth/register', json=payload)

        assert response.status_code == 201
        data = response.json()
        assert data['email'] == payload['email'].lower()
        assert data['role'] == 'STUDENT'
        assert data['college_domain'] == payload['email'].split('@')[1].lower()
        assert 'password' not in data
        assert 'hashed_password' not in data

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, client: AsyncClient, student):
        """Test registering an email that is already taken"""
        response = await client.post('/api/v1/auth/register', json=registration_payload(email=student.email))

        assert response.status_code == 400
        assert response.json()['code'] == 'VALIDATION_ERROR'

    @pytest.mark.asyncio
    async def test_register_admin_rejected(self, client: AsyncClient):
        """Test that administrators cannot self-register"""
        response = await client.post('/api/v1/auth/register', json=registration_payload(role='ADMIN'))

        assert response.status_code == 400
        assert response.json()['message'] == 'Invalid request data'

    @pytest.mark.asyncio
    async def test_register_faculty_requires_department(self, client: AsyncClient):
        """Test faculty registration without a department"""
        response = await client.post('/api/v1/auth/register', json=registration_payload(role='FACULTY'))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_register_short_password(self, client: AsyncClient):
        """Test validation errors are listed per field"""
        response = await client.post('/api/v1/auth/register', json=registration_payload(password='short'))

        assert response.status_code == 400
        fields = [e['field'] for e in response.json()['errors']]
        assert 'password' in fields


class TestLogin:
    """Test login endpoint"""

    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, student, password):
        """Test login returns a token pair and the user"""
        response = await client.post(
            '/api/v1/auth/login',
            json={'email': student.email, 'password': password},
        )

        assert response.status_code == 200
        data = response.json()
        assert data['token_type'] == 'bearer'
        assert data['access_token']
        assert data['refresh_token']
        assert data['user']['id'] == student.id

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, student):
        """Test login with a wrong password"""
        response = await client.post(
            '/api/v1/auth/login',
            json={'email': student.email, 'password': 'wrong-password'},
        )

        assert response.status_code == 401
        assert response.json()['code'] == 'AUTHENTICATION_FAILED'

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, client: AsyncClient):
        response = await client.post(
            '/api/v1/auth/login',
            json={'email': 'nobody@nowhere.edu', 'password': 'whatever123'},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_token_works_for_me(self, client: AsyncClient, student, password):
        """Test the issued access token authenticates /me"""
        login = await client.post(
            '/api/v1/auth/login',
            json={'email': student.email, 'password': password},
        )
        token = login.json()['access_token']

        response = await client.get('/api/v1/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 200
        assert response.json()['id'] == student.id


class TestCurrentUser:
    """Test bearer token handling on a protected endpoint"""

    @pytest.mark.asyncio
    async def test_me_without_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me')

        assert response.status_code in [401, 403]

    @pytest.mark.asyncio
    async def test_me_with_garbage_token(self, client: AsyncClient):
        response = await client.get('/api/v1/auth/me', headers={'Authorization': 'Bearer not-a-jwt'})

        assert response.status_code == 401
        assert response.json()['message'] == 'Could not validate credentials'

    @pytest.mark.asyncio
    async def test_me_with_refresh_token(self, client: AsyncClient, student):
        """Test refresh tokens are not accepted as access tokens"""
        token = create_refresh_token({'sub': student.id})

        response = await client.get('/api/v1/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_with_expired_token(self, client: AsyncClient, student):
        token = create_access_token({'sub': student.id}, expires_delta=timedelta(minutes=-5))

        response = await client.get('/api/v1/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_with_malformed_subject(self, client: AsyncClient):
        token = create_access_token({'sub': 'not-a-uuid'})

        response = await client.get('/api/v1/auth/me', headers={'Authorization': f'Bearer {token}'})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_inactive_user(self, client: AsyncClient, make_user, auth_headers_for):
        inactive = await make_user(is_active=False)

        response = await client.get('/api/v1/auth/me', headers=auth_headers_for(inactive))

        assert response.status_code == 403
