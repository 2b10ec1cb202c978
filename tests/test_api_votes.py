"""API tests for vote, payment and results endpoints."""
import pytest
from unittest.mock import patch

from httpx import AsyncClient, ASGITransport

from contestvote.services.payment_service import PaymentInitiation, VerifiedPayment
from contestvote.utils.exceptions import PaymentError

API_BASE_URL = "http://test"


@pytest.fixture
async def client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url=API_BASE_URL) as ac:
        yield ac


@pytest.fixture
async def contest_id(client):
    response = await client.post("/contests", json={
        "name": "Vote Night",
        "startDate": "2026-09-01T00:00:00Z",
        "endDate": "2026-09-30T00:00:00Z",
    })
    contest_id = response.json()["contestId"]
    for name in ("Ada", "Bo"):
        created = await client.post(
            f"/contests/{contest_id}/participants",
            data={"fullName": name, "email": f"{name.lower()}@example.com", "about": "Bio"},
        )
        assert created.status_code == 201, created.text
    return contest_id


def _verified(contest_id: str, reference: str = "ref_paid", code_name: str = "CW001", vote_count: int = 3):
    return VerifiedPayment(
        reference=reference,
        amount=vote_count * 5000,
        contest_id=contest_id,
        participant_code_name=code_name,
        vote_count=vote_count,
        voter_name="Fan",
    )


async def test_save_vote(client, contest_id):
    response = await client.post(f"/contests/{contest_id}/votes", json={
        "participantCodeName": "CW001",
        "voteCount": 5,
        "voterName": "Fan",
        "paymentReference": "ref-1",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["voteCount"] == 5
    assert body["paymentReference"] == "ref-1"


async def test_save_vote_duplicate_reference(client, contest_id):
    payload = {"participantCodeName": "CW001", "voteCount": 1, "voterName": "Fan", "paymentReference": "dup"}
    assert (await client.post(f"/contests/{contest_id}/votes", json=payload)).status_code == 201

    response = await client.post(f"/contests/{contest_id}/votes", json=payload)

    assert response.status_code == 409
    assert response.json()["detail"] == "Payment reference already exists"


async def test_save_vote_invalid_count(client, contest_id):
    response = await client.post(f"/contests/{contest_id}/votes", json={
        "participantCodeName": "CW001", "voteCount": 0, "voterName": "Fan",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "voteCount must be a positive integer"


async def test_save_vote_count_beyond_limit(client, contest_id):
    response = await client.post(f"/contests/{contest_id}/votes", json={
        "participantCodeName": "CW001", "voteCount": 2**63, "voterName": "Fan",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "voteCount must not exceed 100000"

    results = (await client.get(f"/contests/{contest_id}/results")).json()
    assert all(row["totalVotes"] == 0 for row in results)


async def test_save_vote_evicted_participant(client, contest_id):
    await client.patch("/contests/participants/evict/CW002")

    response = await client.post(f"/contests/{contest_id}/votes", json={
        "participantCodeName": "CW002", "voteCount": 1, "voterName": "Fan",
    })

    assert response.status_code == 409


async def test_admin_votes(client, contest_id):
    response = await client.post(f"/contests/{contest_id}/participants/CW002/votes", json={"voteCount": 7})

    assert response.status_code == 201
    body = response.json()
    assert body["voterName"] == "Admin"
    assert body["paymentReference"].startswith("VOTE_")


async def test_results(client, contest_id):
    await client.post(f"/contests/{contest_id}/votes", json={
        "participantCodeName": "CW001", "voteCount": 5, "voterName": "Fan", "paymentReference": "r1",
    })
    await client.post(f"/contests/{contest_id}/votes", json={
        "participantCodeName": "CW001", "voteCount": 3, "voterName": "Fan", "paymentReference": "r2",
    })
    await client.post(f"/contests/{contest_id}/participants/CW002/votes", json={"voteCount": 7})

    response = await client.get(f"/contests/{contest_id}/results")

    assert response.status_code == 200
    assert response.json() == [
        {"codeName": "CW001", "name": "Ada", "totalVotes": 8, "evicted": False},
        {"codeName": "CW002", "name": "Bo", "totalVotes": 7, "evicted": False},
    ]


async def test_initiate_vote_payment(client, contest_id, payment_service):
    payment_service.initiate.return_value = PaymentInitiation(
        authorization_url="https://checkout.paystack.com/xyz",
        access_code="xyz",
        reference="ref_xyz",
    )

    response = await client.post(f"/contests/{contest_id}/votes/initiate", json={
        "participantCodeName": "CW001",
        "voteCount": 2,
        "email": "fan@example.com",
        "voterName": "Fan",
    })

    assert response.status_code == 200
    assert response.json() == {
        "authorizationUrl": "https://checkout.paystack.com/xyz",
        "accessCode": "xyz",
        "reference": "ref_xyz",
    }
    contest, participant, vote_count, email, voter_name = payment_service.initiate.await_args.args
    assert str(contest.contest_id) == contest_id
    assert participant.code_name == "CW001"
    assert (vote_count, email, voter_name) == (2, "fan@example.com", "Fan")


async def test_initiate_unknown_participant(client, contest_id, payment_service):
    response = await client.post(f"/contests/{contest_id}/votes/initiate", json={
        "participantCodeName": "CW999",
        "voteCount": 2,
        "email": "fan@example.com",
        "voterName": "Fan",
    })

    assert response.status_code == 404
    payment_service.initiate.assert_not_awaited()


async def test_initiate_invalid_email(client, contest_id):
    response = await client.post(f"/contests/{contest_id}/votes/initiate", json={
        "participantCodeName": "CW001",
        "voteCount": 2,
        "email": "not-an-email",
        "voterName": "Fan",
    })
    assert response.status_code == 422


async def test_verify_vote_records_once(client, contest_id, payment_service):
    payment_service.verify.return_value = _verified(contest_id)

    first = await client.get(f"/contests/verify-vote/{contest_id}", params={"reference": "ref_paid"})
    second = await client.get(f"/contests/verify-vote/{contest_id}", params={"reference": "ref_paid"})

    assert first.status_code == 200
    assert first.json()["paymentReference"] == "ref_paid"
    assert first.json()["voteCount"] == 3
    assert second.status_code == 409

    results = (await client.get(f"/contests/{contest_id}/results")).json()
    assert results[0] == {"codeName": "CW001", "name": "Ada", "totalVotes": 3, "evicted": False}


async def test_verify_vote_for_other_contest(client, contest_id, payment_service):
    other = await client.post("/contests", json={
        "name": "Other",
        "startDate": "2026-10-01T00:00:00Z",
        "endDate": "2026-10-30T00:00:00Z",
    })
    payment_service.verify.return_value = _verified(other.json()["contestId"])

    response = await client.get(f"/contests/verify-vote/{contest_id}", params={"reference": "ref_paid"})

    assert response.status_code == 400


async def test_verify_vote_payment_failure(client, contest_id, payment_service):
    payment_service.verify.side_effect = PaymentError("Payment not successful")

    response = await client.get(f"/contests/verify-vote/{contest_id}", params={"reference": "ref_bad"})

    assert response.status_code == 402
    assert response.json()["detail"] == "Payment not successful"


async def test_verify_vote_requires_reference(client, contest_id):
    response = await client.get(f"/contests/verify-vote/{contest_id}")
    assert response.status_code == 422


async def test_health(client, test_engine):
    with patch("contestvote.routers.health.engine", test_engine):
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] == "connected"


async def test_heartbeat(client):
    response = await client.get("/heartbeat")
    assert response.json() == {"status": "alive"}
