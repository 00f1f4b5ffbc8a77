from comandas_shared.api_client import ApiError


class TestAuthRoutes:

    def test_login_stores_session_and_returns_redirect(self, client, api):
        api.post.return_value = {
            "token": "backend-token",
            "type": "Bearer",
            "email": "ana@buensazon.co",
            "nombre": "Ana",
            "rol": "MESERO",
            "idUsuario": 7,
        }

        response = client.post(
            "/api/auth/login", json={"email": "Ana@BuenSazon.co", "password": "secreto1"}
        )

        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "success"
        assert body["data"]["redirect"] == "/mesero/dashboard"
        with client.session_transaction() as sess:
            assert sess["token"] == "backend-token"
            assert sess["usuario"]["idUsuario"] == "7"

    def test_login_bad_credentials(self, client, api):
        api.post.side_effect = ApiError("Unauthorized", 401)

        response = client.post(
            "/api/auth/login", json={"email": "ana@buensazon.co", "password": "mal"}
        )

        assert response.status_code == 401
        assert response.get_json()["error"] == "Credenciales incorrectas"

    def test_login_rejects_malformed_email(self, client, api):
        response = client.post("/api/auth/login", json={"email": "ana", "password": "x"})

        assert response.status_code == 400
        assert response.get_json()["error"] == "Datos inválidos"
        api.post.assert_not_called()

    def test_register_password_mismatch(self, client, api):
        response = client.post(
            "/api/auth/register",
            json={
                "nombre": "Ana",
                "email": "ana@buensazon.co",
                "password": "secreto1",
                "confirm_password": "secreto2",
                "rol": "MESERO",
            },
        )

        assert response.status_code == 400
        assert response.get_json()["error"] == "Las contraseñas no coinciden"
        api.post.assert_not_called()

    def test_register_success(self, client, api):
        api.post.return_value = {"idUsuario": 20}

        response = client.post(
            "/api/auth/register",
            json={
                "nombre": "Luis",
                "email": "luis@buensazon.co",
                "password": "secreto1",
                "confirm_password": "secreto1",
                "rol": "COCINERO",
            },
        )

        assert response.status_code == 201

    def test_password_strength(self, client):
        response = client.post("/api/auth/password-strength", json={"password": "Secreto#2024"})

        assert response.get_json()["data"]["nivel"] == "strong"

    def test_me_requires_login(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401

    def test_me_returns_profile(self, client, login_as):
        login_as("COCINERO")

        response = client.get("/api/auth/me")

        data = response.get_json()["data"]
        assert data["usuario"]["rol"] == "COCINERO"
        assert data["inicial"] == "A"
        assert data["redirect"] == "/cocinero/dashboard"

    def test_logout_clears_session(self, client, login_as):
        login_as("ADMIN")

        client.post("/api/auth/logout")

        with client.session_transaction() as sess:
            assert "token" not in sess
            assert "usuario" not in sess


class TestWebRoutes:

    def test_home_redirects_to_login_when_anonymous(self, client):
        response = client.get("/")

        assert response.status_code == 302
        assert response.headers["Location"].endswith("/login")

    def test_home_redirects_to_role_dashboard(self, client, login_as):
        login_as("ADMIN")

        response = client.get("/")

        assert response.headers["Location"].endswith("/admin/dashboard")

    def test_dashboard_page_points_to_api(self, client):
        response = client.get("/mesero/dashboard")

        assert response.headers["Location"].endswith("/api/mesero/dashboard")

    def test_health(self, client):
        response = client.get("/health")

        assert response.get_json()["status"] == "ok"

    def test_expired_token_forces_relogin(self, client, api, login_as):
        login_as("MESERO")
        api.get.side_effect = ApiError("Unauthorized", 401)

        response = client.get("/api/mesero/mesas/disponibles")

        assert response.status_code == 401
        body = response.get_json()
        assert body["relogin"] is True
        assert body["error"] == "Sesión expirada - Vuelve a iniciar sesión"
        with client.session_transaction() as sess:
            assert "token" not in sess
