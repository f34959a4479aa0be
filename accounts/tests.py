from django.test import TestCase

from .models import User


class UserModelTests(TestCase):
    def test_create_user(self):
        user = User.objects.create_user(email="user@example.com", first_name="Ana", password="pass")
        self.assertTrue(user.check_password("pass"))
        self.assertEqual(user.role, User.ROLE_MEMBER)
        self.assertFalse(user.pulpit)

    def test_create_superuser_is_admin(self):
        user = User.objects.create_superuser(email="root@example.com", password="pass")
        self.assertTrue(user.is_staff)
        self.assertEqual(user.role, User.ROLE_ADMIN)
        self.assertTrue(user.is_admin)

    def test_full_name_and_initials(self):
        user = User(email="a@example.com", first_name="Ana", last_name="García")
        self.assertEqual(user.full_name, "Ana García")
        self.assertEqual(user.initials, "AG")
        self.assertEqual(User(email="b@example.com").full_name, "Sin nombre")

    def test_email_is_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password="pass")


class LoginViewTests(TestCase):
    def test_login_with_email(self):
        User.objects.create_user(email="user@example.com", password="pass")
        response = self.client.post("/login/", {"username": "user@example.com", "password": "pass"})
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.url, "/")

    def test_login_rejects_bad_password(self):
        User.objects.create_user(email="user@example.com", password="pass")
        response = self.client.post("/login/", {"username": "user@example.com", "password": "nope"})
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Email o contraseña incorrectos.")
