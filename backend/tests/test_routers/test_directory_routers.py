import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_landing_anonymous(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["app"] == "CredMapping"
    assert data["login_url"] == "/auth/login"
    assert data["message"] is None


@pytest.mark.asyncio
async def test_landing_error_messages(client: AsyncClient):
    domain = await client.get("/", params={"error": "domain_not_allowed"})
    assert domain.json()["message"] == (
        "Access is restricted to @vestasolutions.com and @vestatelemed.com accounts."
    )

    failed = await client.get("/", params={"error": "oauth_callback_failed"})
    assert failed.json()["message"] == "Google sign-in failed. Please try again."

    unknown = await client.get("/", params={"error": "something_else"})
    assert unknown.json()["message"] == "Authentication error."


@pytest.mark.asyncio
async def test_landing_redirects_signed_in_users(client: AsyncClient, staff_headers):
    response = await client.get("/", headers=staff_headers)

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"


@pytest.mark.asyncio
async def test_facility_directory(client: AsyncClient, staff_headers, seeded):
    response = await client.get("/facilities", headers=staff_headers)

    assert response.status_code == 200
    facilities = response.json()["facilities"]
    assert [f["name"] for f in facilities] == ["Mercy", "Grace"]
    assert facilities[1]["email"] == "—"

    filtered = await client.get("/facilities", params={"search": "tx"}, headers=staff_headers)
    assert [f["name"] for f in filtered.json()["facilities"]] == ["Mercy"]


@pytest.mark.asyncio
async def test_global_search(client: AsyncClient, staff_headers, seeded):
    response = await client.get("/search", params={"q": "  mercy  "}, headers=staff_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["query"] == "mercy"
    assert data["providers"] == []
    assert data["facilities"] == [
        {
            "id": str(seeded.mercy.id),
            "name": "Mercy",
            "subtitle": "TX • cred@mercy.test",
            "href": "/facilities?search=mercy",
        }
    ]


@pytest.mark.asyncio
async def test_global_search_links_providers(client: AsyncClient, staff_headers, seeded):
    response = await client.get("/search", params={"q": "alice adams"}, headers=staff_headers)

    providers = response.json()["providers"]
    assert [p["name"] for p in providers] == ["Alice Adams, MD"]
    assert providers[0]["subtitle"] == "alice@clinic.test"
    assert providers[0]["href"] == "/providers?search=alice%20adams"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [{"q": "a"}, {"q": "x" * 101}, {"q": "mercy", "limit_per_type": 0}, {"q": "mercy", "limit_per_type": 21}],
)
async def test_global_search_rejects_bad_input(client: AsyncClient, staff_headers, params):
    response = await client.get("/search", params=params, headers=staff_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_directories_require_auth(client: AsyncClient):
    for path in ("/providers", "/facilities", "/search?q=mercy"):
        response = await client.get(path)
        assert response.status_code == 401
