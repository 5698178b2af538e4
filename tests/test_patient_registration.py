from datetime import timedelta

from jose import jwt

from clinic.core.security import SESSION_TOKEN_ALGORITHM, encode_session_token
from clinic.models.otp_code import OtpCode
from clinic.models.patient import Patient
from tests.base import TEST_JWT_SECRET, ClinicApiTestCase


class PatientRegistrationTests(ClinicApiTestCase):
    def test_register_without_verified_email_is_rejected(self):
        self.send_email_otp("asha@example.com", "123456")
        response = self.client.post("/api/patients/register", json=self.registration_payload())
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Please verify your email first"})

        with self.SessionLocal() as db:
            self.assertEqual(db.query(Patient).count(), 0)

    def test_register_requires_email_otp_field(self):
        self.send_and_verify_email_otp("asha@example.com")
        payload = self.registration_payload()
        payload.pop("emailOtp")
        response = self.client.post("/api/patients/register", json=payload)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Email OTP verification is required"})

    def test_register_requires_identity_fields(self):
        payload = self.registration_payload()
        payload.pop("firstName")
        response = self.client.post("/api/patients/register", json=payload)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Field 'firstName' is required"})

    def test_register_success_stores_hashed_password(self):
        patient_id = self.register_patient()
        patient = self.get_patient(patient_id)
        self.assertIsNotNone(patient)
        self.assertEqual(patient.email, "asha@example.com")
        self.assertEqual(patient.first_name, "Asha")
        self.assertNotEqual(patient.password, "s3cret-pass")
        self.assertTrue(patient.password.startswith("$pbkdf2-sha256$"))
        self.assertTrue(patient.email_verified)
        self.assertFalse(patient.phone_verified)

    def test_register_normalizes_email_case(self):
        self.send_and_verify_email_otp("asha@example.com")
        response = self.client.post(
            "/api/patients/register",
            json=self.registration_payload(email="  Asha@Example.com "),
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(self.get_patient(response.json()["id"]).email, "asha@example.com")

    def test_verification_older_than_window_is_rejected(self):
        self.send_and_verify_email_otp("asha@example.com")
        self.age_verified_otp("asha@example.com", minutes=31)
        response = self.client.post("/api/patients/register", json=self.registration_payload())
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Email verification expired. Please verify again."})

    def test_verification_inside_window_is_accepted(self):
        self.send_and_verify_email_otp("asha@example.com")
        self.age_verified_otp("asha@example.com", minutes=10)
        response = self.client.post("/api/patients/register", json=self.registration_payload())
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["message"], "Registration successful! You can now login.")

    def test_duplicate_email_is_conflict(self):
        self.register_patient()
        self.send_and_verify_email_otp("asha@example.com")
        response = self.client.post(
            "/api/patients/register",
            json=self.registration_payload(phone="9000000002"),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Email already registered"})

    def test_duplicate_phone_is_conflict(self):
        self.register_patient()
        self.send_and_verify_email_otp("other@example.com")
        response = self.client.post(
            "/api/patients/register",
            json=self.registration_payload(email="other@example.com"),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Phone number already registered"})

        with self.SessionLocal() as db:
            self.assertEqual(db.query(Patient).count(), 1)

    def test_verified_code_is_not_consumed_by_registration(self):
        self.send_and_verify_email_otp("asha@example.com")
        self.client.post("/api/patients/register", json=self.registration_payload())
        with self.SessionLocal() as db:
            row = db.query(OtpCode).one()
            self.assertTrue(row.verified)


class PatientLoginTests(ClinicApiTestCase):
    def test_login_token_carries_identity(self):
        patient_id = self.register_patient()
        response = self.client.post(
            "/api/patients/login",
            json={"email": "asha@example.com", "password": "s3cret-pass"},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["user"]["id"], patient_id)
        self.assertEqual(body["user"]["firstName"], "Asha")

        claims = jwt.decode(body["token"], TEST_JWT_SECRET, algorithms=[SESSION_TOKEN_ALGORITHM])
        self.assertEqual(claims["id"], patient_id)
        self.assertEqual(claims["email"], "asha@example.com")
        self.assertEqual(claims["role"], "patient")
        self.assertEqual(claims["exp"] - claims["iat"], 24 * 3600)

    def test_login_failures_are_indistinguishable(self):
        self.register_patient()
        wrong_password = self.client.post(
            "/api/patients/login",
            json={"email": "asha@example.com", "password": "nope"},
        )
        unknown_email = self.client.post(
            "/api/patients/login",
            json={"email": "ghost@example.com", "password": "nope"},
        )
        self.assertEqual(wrong_password.status_code, 401)
        self.assertEqual(unknown_email.status_code, 401)
        self.assertEqual(wrong_password.json(), unknown_email.json())
        self.assertEqual(wrong_password.json(), {"error": "Invalid email or password"})

    def test_login_requires_both_fields(self):
        response = self.client.post("/api/patients/login", json={"email": "asha@example.com"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Field 'password' is required"})

    def test_me_returns_profile_without_password(self):
        patient_id = self.register_patient()
        token = self.login_patient()
        response = self.client.get("/api/patients/me", headers=self.auth(token))
        self.assertEqual(response.status_code, 200)
        user = response.json()["user"]
        self.assertEqual(user["id"], patient_id)
        self.assertEqual(user["last_name"], "Verma")
        self.assertNotIn("password", user)

    def test_me_without_token_is_unauthorized(self):
        response = self.client.get("/api/patients/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Authentication required. Please login first."})

    def test_me_with_bad_or_expired_token_is_forbidden(self):
        self.register_patient()
        bad = self.client.get("/api/patients/me", headers=self.auth("not-a-jwt"))
        self.assertEqual(bad.status_code, 403)
        self.assertEqual(bad.json(), {"error": "Invalid or expired token. Please login again."})

        expired = encode_session_token(
            {"sub": "1", "id": 1, "email": "asha@example.com", "role": "patient"},
            secret=TEST_JWT_SECRET,
            ttl=timedelta(seconds=-10),
        )
        response = self.client.get("/api/patients/me", headers=self.auth(expired))
        self.assertEqual(response.status_code, 403)

        foreign = encode_session_token(
            {"sub": "1", "id": 1, "email": "asha@example.com", "role": "patient"},
            secret="some-other-secret",
            ttl=timedelta(hours=1),
        )
        response = self.client.get("/api/patients/me", headers=self.auth(foreign))
        self.assertEqual(response.status_code, 403)

    def test_me_rejects_doctor_token(self):
        self.create_doctor()
        token = self.login_doctor()
        response = self.client.get("/api/patients/me", headers=self.auth(token))
        self.assertEqual(response.status_code, 403)

    def test_me_for_deleted_patient_is_not_found(self):
        patient_id = self.register_patient()
        token = self.login_patient()
        with self.SessionLocal() as db:
            db.delete(db.get(Patient, patient_id))
            db.commit()
        response = self.client.get("/api/patients/me", headers=self.auth(token))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Patient not found"})
