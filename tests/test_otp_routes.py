from datetime import datetime, timedelta, timezone

import httpx

from otp_service.models.otp import ChannelType, OtpRecord, User


def _record(otp: str, type_: str = "mail", expires_in: timedelta = timedelta(minutes=5)) -> OtpRecord:
    return OtpRecord(
        user_id="someUserId",
        type=ChannelType(type_),
        otp=otp,
        expiry_time=datetime.now(timezone.utc) + expires_in,
    )


def test_send_sms_otp_success(client, mock_engine):
    mock_engine.directory.find_one.return_value = User(id="someUserId", phone_no="1234567890")

    resp = client.post("/otp/v1/sms", json={"user_id": "someUserId"})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "SMS sent successfully"}
    mock_engine.store.upsert.assert_called_once()


def test_send_sms_otp_user_not_found(client, mock_engine):
    mock_engine.directory.find_one.return_value = None

    resp = client.post("/otp/v1/sms", json={"user_id": "nonExistentUserId"})

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "User not found!"}


def test_send_sms_otp_delivery_failure(client, mock_engine, gateways):
    mock_engine.directory.find_one.return_value = User(id="someUserId", phone_no="1234567890")
    gateways[ChannelType.SMS].success = False
    gateways[ChannelType.SMS].message = "Failed to send SMS"

    resp = client.post("/otp/v1/sms", json={"user_id": "someUserId"})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Failed to send SMS"}


def test_send_mail_otp_success(client, mock_engine):
    mock_engine.directory.find_one.return_value = User(id="someUserId", email="test@example.com")

    resp = client.post("/otp/v1/mail", json={"user_id": "someUserId"})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Mail sent successfully"}


def test_send_mail_otp_user_not_found(client, mock_engine):
    mock_engine.directory.find_one.return_value = None

    resp = client.post("/otp/v1/mail", json={"user_id": "nonExistentUserId"})

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "User not found!"}


def test_send_mail_otp_delivery_failure(client, mock_engine, gateways):
    mock_engine.directory.find_one.return_value = User(id="someUserId", email="test@example.com")
    gateways[ChannelType.MAIL].success = False
    gateways[ChannelType.MAIL].message = "Failed to send mail"

    resp = client.post("/otp/v1/mail", json={"user_id": "someUserId"})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Failed to send mail"}


def test_verify_mail_otp(client, mock_engine):
    mock_engine.store.find_one.return_value = _record("1234", "mail")

    resp = client.post("/otp/v1/verify", json={"user_id": "someUserId", "otp": "1234", "type": "mail"})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "OTP verified successfully!"}
    mock_engine.directory.update_one.assert_called_once_with("someUserId", {"email_verified": True})


def test_verify_sms_otp(client, mock_engine):
    mock_engine.store.find_one.return_value = _record("1234", "sms")

    resp = client.post("/otp/v1/verify", json={"user_id": "someUserId", "otp": "1234", "type": "sms"})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "OTP verified successfully!"}


def test_verify_user_not_found(client, mock_engine):
    mock_engine.store.find_one.return_value = None
    mock_engine.directory.find_one.return_value = None

    resp = client.post("/otp/v1/verify", json={"user_id": "nonExistentUserId", "otp": "1234", "type": "mail"})

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "User not found!"}


def test_verify_without_pending_otp_is_404(client, mock_engine):
    mock_engine.store.find_one.return_value = None
    mock_engine.directory.find_one.return_value = User(id="someUserId", email="test@example.com")

    resp = client.post("/otp/v1/verify", json={"user_id": "someUserId", "otp": "1234", "type": "mail"})

    assert resp.status_code == 404


def test_verify_expired_otp(client, mock_engine):
    mock_engine.store.find_one.return_value = _record("1234", "mail", expires_in=timedelta(minutes=-1))

    resp = client.post("/otp/v1/verify", json={"user_id": "someUserId", "otp": "1234", "type": "mail"})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "OTP has expired or is invalid"}


def test_verify_invalid_otp(client, mock_engine):
    mock_engine.store.find_one.return_value = _record("5678", "mail")

    resp = client.post("/otp/v1/verify", json={"user_id": "someUserId", "otp": "1234", "type": "mail"})

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Invalid OTP!"}
    mock_engine.directory.update_one.assert_not_called()


def test_verify_rejects_unknown_channel_type(client):
    resp = client.post("/otp/v1/verify", json={"user_id": "someUserId", "otp": "1234", "type": "fax"})
    assert resp.status_code == 422


def test_store_outage_returns_internal_error(client, mock_engine):
    mock_engine.store.find_one.side_effect = httpx.ConnectError("connection refused")

    resp = client.post("/otp/v1/verify", json={"user_id": "someUserId", "otp": "1234", "type": "sms"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "internal_error"
