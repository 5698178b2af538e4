from jose import jwt

from clinic.core.security import SESSION_TOKEN_ALGORITHM, verify_password
from clinic.models.doctor import Doctor
from clinic.models.patient import Patient
from tests.base import ADMIN_EMAIL, TEST_JWT_SECRET, ClinicApiTestCase


class AdminAuthTests(ClinicApiTestCase):
    def test_login_issues_admin_token(self):
        response = self.client.post("/api/admin/login", json={"email": ADMIN_EMAIL.upper(), "password": "admin-pass-123"})
        self.assertEqual(response.status_code, 200)
        claims = jwt.decode(response.json()["token"], TEST_JWT_SECRET, algorithms=[SESSION_TOKEN_ALGORITHM])
        self.assertEqual(claims["role"], "admin")
        self.assertEqual(claims["email"], ADMIN_EMAIL)

    def test_login_rejects_wrong_password(self):
        response = self.client.post("/api/admin/login", json={"email": ADMIN_EMAIL, "password": "guess"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid email or password"})

    def test_admin_routes_require_admin_role(self):
        self.assertEqual(self.client.get("/api/admin/contacts").status_code, 401)

        self.create_doctor()
        doctor_token = self.login_doctor()
        for path in ("/api/admin/contacts", "/api/admin/appointments", "/api/admin/patients", "/api/admin/doctors"):
            response = self.client.get(path, headers=self.auth(doctor_token))
            self.assertEqual(response.status_code, 403, path)


class AdminDisabledTests(ClinicApiTestCase):
    settings_overrides = {"ADMIN_EMAIL": "", "ADMIN_PASSWORD": ""}

    def test_login_impossible_without_configured_admin(self):
        response = self.client.post("/api/admin/login", json={"email": "admin@healthplus.com", "password": "x"})
        self.assertEqual(response.status_code, 401)


class AdminRecordsTests(ClinicApiTestCase):
    def setUp(self):
        super().setUp()
        self.headers = self.auth(self.login_admin())

    def test_list_and_delete_contacts(self):
        first = self.add_contact(name="First")
        second = self.add_contact(name="Second")

        response = self.client.get("/api/admin/contacts", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual([row["id"] for row in response.json()], [second, first])

        deleted = self.client.delete(f"/api/admin/contacts/{first}", headers=self.headers)
        self.assertEqual(deleted.status_code, 200)
        self.assertTrue(deleted.json()["success"])

        again = self.client.delete(f"/api/admin/contacts/{first}", headers=self.headers)
        self.assertEqual(again.status_code, 404)
        self.assertEqual(again.json(), {"error": "Contact not found"})

    def test_list_and_delete_appointments(self):
        appointment_id = self.add_appointment()
        rows = self.client.get("/api/admin/appointments", headers=self.headers).json()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["status"], "pending")
        self.assertIsNotNone(rows[0]["created_at"])

        self.assertEqual(self.client.delete(f"/api/admin/appointments/{appointment_id}", headers=self.headers).status_code, 200)
        self.assertEqual(self.client.get("/api/admin/appointments", headers=self.headers).json(), [])

    def test_list_patients_hides_password(self):
        patient_id = self.register_patient()
        rows = self.client.get("/api/admin/patients", headers=self.headers).json()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["id"], patient_id)
        self.assertNotIn("password", rows[0])
        self.assertTrue(rows[0]["email_verified"])

        self.assertEqual(self.client.delete(f"/api/admin/patients/{patient_id}", headers=self.headers).status_code, 200)
        with self.SessionLocal() as db:
            self.assertEqual(db.query(Patient).count(), 0)


class AdminDoctorTests(ClinicApiTestCase):
    def setUp(self):
        super().setUp()
        self.headers = self.auth(self.login_admin())

    def _doctor_payload(self, **overrides):
        payload = {
            "name": "Dr. Meera Joshi",
            "email": "meera@healthplus.com",
            "department": "Cardiology",
            "phone": "7052691199",
            "password": "meera-pass",
        }
        payload.update(overrides)
        return payload

    def test_create_doctor_and_login(self):
        response = self.client.post("/api/admin/doctors", json=self._doctor_payload(), headers=self.headers)
        self.assertEqual(response.status_code, 200, response.text)
        doctor_id = response.json()["id"]

        token = self.login_doctor(email="meera@healthplus.com", password="meera-pass")
        me = self.client.get("/api/doctors/me", headers=self.auth(token)).json()
        self.assertEqual(me["doctor"]["id"], doctor_id)

        listed = self.client.get("/api/admin/doctors", headers=self.headers).json()
        self.assertEqual([row["email"] for row in listed], ["meera@healthplus.com"])
        self.assertNotIn("password", listed[0])

    def test_create_doctor_without_password_uses_default(self):
        payload = self._doctor_payload()
        payload.pop("password")
        response = self.client.post("/api/admin/doctors", json=payload, headers=self.headers)
        self.assertEqual(response.status_code, 200)
        with self.SessionLocal() as db:
            row = db.get(Doctor, response.json()["id"])
            self.assertTrue(verify_password("doctor123", row.password))

    def test_create_duplicate_email_is_conflict(self):
        self.create_doctor(email="meera@healthplus.com")
        response = self.client.post(
            "/api/admin/doctors",
            json=self._doctor_payload(email="Meera@HealthPlus.com"),
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Email already exists"})

    def test_create_requires_fields(self):
        payload = self._doctor_payload()
        payload.pop("department")
        response = self.client.post("/api/admin/doctors", json=payload, headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Field 'department' is required"})

    def test_update_doctor(self):
        doctor_id = self.create_doctor()
        response = self.client.put(
            f"/api/admin/doctors/{doctor_id}",
            json=self._doctor_payload(name="Dr. Pawan K. Pandey", email="pawan@healthplus.com", password=""),
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200, response.text)
        with self.SessionLocal() as db:
            row = db.get(Doctor, doctor_id)
            self.assertEqual(row.name, "Dr. Pawan K. Pandey")
            self.assertEqual(row.department, "Cardiology")
            # Blank password keeps the existing one.
            self.assertTrue(verify_password("doctor123", row.password))

    def test_update_to_taken_email_is_conflict(self):
        self.create_doctor()
        other_id = self.create_doctor(name="Dr. Anuradha", email="anuradha@healthplus.com", phone="7052691143")
        response = self.client.put(
            f"/api/admin/doctors/{other_id}",
            json=self._doctor_payload(email="pawan@healthplus.com"),
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Email already used by another doctor"})

    def test_update_and_delete_missing_doctor(self):
        update = self.client.put("/api/admin/doctors/404", json=self._doctor_payload(), headers=self.headers)
        self.assertEqual(update.status_code, 404)
        self.assertEqual(update.json(), {"error": "Doctor not found"})

        delete = self.client.delete("/api/admin/doctors/404", headers=self.headers)
        self.assertEqual(delete.status_code, 404)

    def test_delete_doctor(self):
        doctor_id = self.create_doctor()
        response = self.client.delete(f"/api/admin/doctors/{doctor_id}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        with self.SessionLocal() as db:
            self.assertIsNone(db.get(Doctor, doctor_id))
