PASSWORD = "correct-horse-battery"


def test_signup_and_me(client, register, login) -> None:
    register("asha@example.com", mobile="+91 98765 43210")
    headers = login("asha@example.com")

    response = client.get("/api/v1/users/me", headers=headers)
    assert response.status_code == 200
    me = response.json()
    assert me["email"] == "asha@example.com"
    assert me["account_type"] == "user"
    assert me["eco_points"] == 0
    assert me["company"] is None


def test_company_signup_creates_company(client, register, login) -> None:
    account = register("ops@ecyclehub.example.com", account_type="company",
                       company_name="E-Cycle Hub")
    assert account["account_type"] == "company"
    assert account["company"]["company_name"] == "E-Cycle Hub"

    headers = login("ops@ecyclehub.example.com")
    companies = client.get("/api/v1/companies/", headers=headers).json()
    assert [c["company_name"] for c in companies] == ["E-Cycle Hub"]


def test_company_signup_requires_name(client) -> None:
    response = client.post("/api/v1/users/signup", json={
        "email": "ops@example.com",
        "password": PASSWORD,
        "username": "ops",
        "account_type": "company",
    })
    assert response.status_code == 422


def test_duplicate_email_conflicts(client, register) -> None:
    register("asha@example.com")
    response = client.post("/api/v1/users/signup", json={
        "email": "asha@example.com",
        "password": PASSWORD,
        "username": "asha2",
    })
    assert response.status_code == 409


def test_wrong_password_is_rejected(client, register) -> None:
    register("asha@example.com")
    response = client.post("/api/v1/users/token",
                           json={"email": "asha@example.com", "password": "not-the-password"})
    assert response.status_code == 401


def test_refresh_issues_new_access_token(client, register) -> None:
    register("asha@example.com")
    tokens = client.post("/api/v1/users/token",
                         json={"email": "asha@example.com", "password": PASSWORD}).json()
    assert tokens["account_type"] == "user"

    response = client.post("/api/v1/users/refresh",
                           json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 200

    # An access token is not accepted as a refresh token
    response = client.post("/api/v1/users/refresh",
                           json={"refresh_token": tokens["access_token"]})
    assert response.status_code == 401


def test_protected_routes_need_a_token(client) -> None:
    assert client.get("/api/v1/requests/").status_code == 401
    assert client.get("/api/v1/notifications/").status_code == 401


def test_user_accounts_cannot_open_the_review_board(client, user_headers) -> None:
    assert client.get("/api/v1/review/requests", headers=user_headers).status_code == 403


def test_dashboard_defaults(client, register, login) -> None:
    register("nomobile@example.com")
    headers = login("nomobile@example.com")

    dashboard = client.get("/api/v1/dashboard/", headers=headers).json()
    assert dashboard == {
        "display_name": "nomobile",
        "email": "nomobile@example.com",
        "mobile": "Not provided",
        "eco_points": 0,
        "unread_count": 0,
    }


def test_readiness(client) -> None:
    assert client.get("/api/v1/readiness").json() == {"status": "ready", "database": "online"}
