import pytest

from app.core.errors import DependencyError
from app.models.company import Company, Stand
from app.models.user import User
from app.services.storage import LocalBlobStorage


pytestmark = pytest.mark.asyncio

COMPANY = {
    "name": "Acme",
    "description": "Fabricamos de todo",
    "email": "rrhh@acme.example",
    "sector": "Industria",
    "links": [{"additionalButtonTitle": "Web", "additionalButtonLink": "https://acme.example"}],
}


async def create_profile(client, headers, **overrides):
    return await client.post("/api/v1/company", json={**COMPANY, **overrides}, headers=headers)


async def test_company_creates_and_reads_profile(client, login_as):
    co, headers = await login_as("co")

    created = await create_profile(client, headers)
    assert created.status_code == 201, created.text
    assert (await User.get(id=co.id)).information is True

    own = await client.get("/api/v1/company", headers=headers)
    assert own.status_code == 200
    body = own.json()
    assert body["companyID"] == str(co.id)
    assert body["name"] == "Acme"
    assert body["links"] == COMPANY["links"]
    assert body["documents"] == []

    by_id = await client.get(f"/api/v1/company/{co.id}", headers=headers)
    assert by_id.status_code == 200
    assert by_id.json()["id"] == body["id"]


async def test_profile_is_created_once(client, login_as):
    _, headers = await login_as("co")
    assert (await create_profile(client, headers)).status_code == 201
    again = await create_profile(client, headers)
    assert again.status_code == 400
    assert again.json() == {"error": "La empresa ya tiene información registrada"}


async def test_profile_validation(client, login_as):
    _, headers = await login_as("co")
    missing = await create_profile(client, headers, description="")
    assert missing.status_code == 400
    assert missing.json() == {"error": "Nombre y descripción son obligatorios"}

    bad_links = await create_profile(client, headers, links=[{"additionalButtonTitle": "Web"}])
    assert bad_links.status_code == 400
    assert bad_links.json() == {"error": "Cada link debe tener un título y una URL válida"}


async def test_non_company_roles_cannot_create_profile(client, login_as):
    for role in ("admin", "visitor"):
        _, headers = await login_as(role)
        resp = await create_profile(client, headers)
        assert resp.status_code == 403
        assert resp.json() == {"error": "Acceso denegado"}


async def test_missing_profile_is_404(client, login_as):
    _, headers = await login_as("co")
    resp = await client.get("/api/v1/company", headers=headers)
    assert resp.status_code == 404
    assert resp.json() == {"error": "Empresa no encontrada"}


async def test_company_cannot_read_another_profile(client, login_as):
    other, other_headers = await login_as("co")
    await create_profile(client, other_headers)
    _, headers = await login_as("co")
    resp = await client.get(f"/api/v1/company/{other.id}", headers=headers)
    assert resp.status_code == 403

    _, admin_headers = await login_as("admin")
    assert (await client.get(f"/api/v1/company/{other.id}", headers=admin_headers)).status_code == 200


async def test_update_profile(client, login_as):
    co, headers = await login_as("co")
    await create_profile(client, headers)

    resp = await client.put(
        f"/api/v1/company/{co.id}",
        json={"description": "Ahora también software", "links": []},
        headers=headers,
    )
    assert resp.status_code == 200
    company = await Company.get(owner_id=co.id)
    assert company.description == "Ahora también software"
    assert company.links == []
    assert company.name == "Acme"


async def test_save_stand(client, login_as):
    co, headers = await login_as("co")
    payload = {"URLStand": "https://cdn.example/stand1.glb", "URLRecep": "https://cdn.example/recep2.glb"}

    resp = await client.post("/api/v1/company/stand", json=payload, headers=headers)
    assert resp.status_code == 200
    stand = await Stand.get(id=co.company_stand_id)
    assert stand.url_stand == payload["URLStand"]

    # Saving again replaces the selection instead of adding a stand.
    payload["URLRecep"] = "https://cdn.example/recep3.glb"
    await client.post("/api/v1/company/stand", json=payload, headers=headers)
    assert await Stand.filter(company_id=co.id).count() == 1
    assert (await Stand.get(id=co.company_stand_id)).url_recep == payload["URLRecep"]

    missing = await client.post("/api/v1/company/stand", json={"URLStand": "x"}, headers=headers)
    assert missing.status_code == 400


async def test_upload_and_prune_documents(client, login_as, app):
    co, headers = await login_as("co")
    await create_profile(client, headers)
    blobs_root = app.state.blobs.base_path

    upload = await client.post(
        f"/api/v1/company/{co.id}/documents",
        files=[
            ("documents", ("dossier.pdf", b"%PDF-dossier", "application/pdf")),
            ("documents", ("tarifas.pdf", b"%PDF-tarifas", "application/pdf")),
        ],
        headers=headers,
    )
    assert upload.status_code == 200, upload.text
    docs = upload.json()["documents"]
    assert [d["fileName"] for d in docs] == ["dossier.pdf", "tarifas.pdf"]
    assert all(d["url"].startswith("/uploads/company_documents/") for d in docs)

    stored = (await Company.get(owner_id=co.id)).documents
    tarifas_path = blobs_root / next(d["blobId"] for d in stored if d["fileName"] == "tarifas.pdf")
    assert tarifas_path.read_bytes() == b"%PDF-tarifas"

    # The uploaded file is served under the public URL.
    served = await client.get(docs[0]["url"])
    assert served.status_code == 200
    assert served.content == b"%PDF-dossier"

    prune = await client.put(
        f"/api/v1/company/{co.id}/documents",
        json={"documentsToKeep": [{"fileName": "dossier.pdf"}]},
        headers=headers,
    )
    assert prune.status_code == 200
    assert [d["fileName"] for d in prune.json()["documents"]] == ["dossier.pdf"]
    assert not tarifas_path.exists()


async def test_documents_of_another_company_are_forbidden(client, login_as):
    other, _ = await login_as("co")
    _, headers = await login_as("co")
    resp = await client.post(
        f"/api/v1/company/{other.id}/documents",
        files=[("documents", ("x.pdf", b"x", "application/pdf"))],
        headers=headers,
    )
    assert resp.status_code == 403


class FailingUploads(LocalBlobStorage):
    """Local storage whose n-th upload fails like an unreachable blob store."""

    def __init__(self, base_path, fail_on: int):
        super().__init__(base_path)
        self.fail_on = fail_on
        self.calls = 0

    async def upload(self, *args, **kwargs):
        self.calls += 1
        if self.calls == self.fail_on:
            raise DependencyError("blob upload failed")
        return await super().upload(*args, **kwargs)


async def test_failed_upload_removes_documents_already_stored(client, login_as, app):
    co, headers = await login_as("co")
    await create_profile(client, headers)
    app.state.blobs = FailingUploads(str(app.state.blobs.base_path), fail_on=2)

    resp = await client.post(
        f"/api/v1/company/{co.id}/documents",
        files=[
            ("documents", ("dossier.pdf", b"%PDF-dossier", "application/pdf")),
            ("documents", ("tarifas.pdf", b"%PDF-tarifas", "application/pdf")),
        ],
        headers=headers,
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": "Error interno del servidor"}
    assert [p for p in app.state.blobs.base_path.rglob("*") if p.is_file()] == []
    assert (await Company.get(owner_id=co.id)).documents == []
