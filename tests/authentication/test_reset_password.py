from datetime import timedelta
from fastapi import status
from eventreg.core.exceptions import EmailDeliveryError
from eventreg.core.security import hash_token, utcnow, verify_password
from eventreg.models.user import User


def request_reset(client, mailer, email):
    response = client.post("/api/v1/forgetpassword", json={"email": email})
    assert response.status_code == status.HTTP_200_OK
    return mailer.send_reset_email.call_args.args[1]


class TestForgetPasswordEndpoint:
    """Test cases for POST /api/v1/forgetpassword"""

    def test_forget_password_success(self, client, create_test_user, mailer, db_session):
        user = create_test_user()

        response = client.post("/api/v1/forgetpassword", json={"email": user.email})

        assert response.status_code == status.HTTP_200_OK
        mailer.send_reset_email.assert_called_once()
        to_email, raw_token = mailer.send_reset_email.call_args.args
        assert to_email == user.email
        assert len(raw_token) == 64

        db_user = db_session.query(User).filter_by(email=user.email).first()
        assert db_user.password_reset_token == hash_token(raw_token)
        expiry = db_user.password_reset_token_expiry.replace(tzinfo=None)
        now = utcnow().replace(tzinfo=None)
        assert now < expiry <= now + timedelta(minutes=10)

    def test_forget_password_unknown_email(self, client):
        response = client.post("/api/v1/forgetpassword", json={"email": "nonexistent@example.com"})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["code"] == "userNotExist"

    def test_forget_password_mail_failure(self, client, create_test_user, mailer):
        user = create_test_user()
        mailer.send_reset_email.side_effect = EmailDeliveryError()

        response = client.post("/api/v1/forgetpassword", json={"email": user.email})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["code"] == "emailDeliveryFailed"


class TestResetPasswordWithToken:
    """Test cases for POST /api/v1/resetpassword with a reset token"""

    def test_reset_then_login_and_token_reuse(self, client, create_test_user, mailer, db_session):
        user = create_test_user(email="test@example.com", password="old_password")
        raw_token = request_reset(client, mailer, user.email)

        response = client.post(
            "/api/v1/resetpassword",
            json={"reset_token": raw_token, "new_password": "new_secure_password"},
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Password successfully reset"

        db_user = db_session.query(User).filter_by(email=user.email).first()
        assert verify_password("new_secure_password", db_user.passwordhash)
        assert db_user.password_reset_token is None
        assert db_user.password_reset_token_expiry is None
        assert db_user.password_changed_at is not None

        response = client.post(
            "/api/v1/login",
            json={"email": user.email, "password": "new_secure_password"},
        )
        assert response.status_code == status.HTTP_200_OK

        response = client.post(
            "/api/v1/resetpassword",
            json={"reset_token": raw_token, "new_password": "another_password"},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "invalidOrExpiredToken"

    def test_reset_with_expired_token(self, client, create_test_user, mailer, db_session):
        user = create_test_user(password="old_password")
        raw_token = request_reset(client, mailer, user.email)

        db_user = db_session.query(User).filter_by(email=user.email).first()
        db_user.password_reset_token_expiry = utcnow() - timedelta(minutes=1)
        db_session.commit()

        response = client.post(
            "/api/v1/resetpassword",
            json={"reset_token": raw_token, "new_password": "new_secure_password"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "invalidOrExpiredToken"
        db_session.expire_all()
        db_user = db_session.query(User).filter_by(email=user.email).first()
        assert verify_password("old_password", db_user.passwordhash)

    def test_reset_with_unknown_token(self, client):
        response = client.post(
            "/api/v1/resetpassword",
            json={"reset_token": "0" * 64, "new_password": "new_secure_password"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reset_requires_a_channel(self, client):
        response = client.post("/api/v1/resetpassword", json={"new_password": "new_secure_password"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "validationError"

    def test_reset_short_password(self, client):
        response = client.post(
            "/api/v1/resetpassword",
            json={"reset_token": "0" * 64, "new_password": "short"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "validationError"
