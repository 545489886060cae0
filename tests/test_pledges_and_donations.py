import pytest


@pytest.fixture
def pledge(client, donor_profile, blood_request):
    response = client.post('/api/Donor_Pledges', json={
        'donorProfile': {'donorId': donor_profile['donorId']},
        'matchedRequest': {'requestId': blood_request['requestId']},
        'pledgedUnits': 2,
        'message': 'On my way',
    })
    assert response.status_code == 200, response.get_json()
    return response.get_json()


# ------------------------- #
# Donor Pledges
# ------------------------- #
def test_create_pledge_returns_full_details(pledge, donor_profile, blood_request):
    assert pledge['pledgeId'] is not None
    assert pledge['pledgeStatus'] == 'PENDING'
    assert pledge['pledgedUnits'] == 2
    assert pledge['createdAt'] and pledge['updatedAt']
    assert pledge['donorProfile']['donorId'] == donor_profile['donorId']
    assert pledge['donorProfile']['user']['email'] == 'jane@example.com'
    assert pledge['matchedRequest']['requestId'] == blood_request['requestId']
    assert pledge['matchedRequest']['hospitalName'] == 'General Hospital'


def test_create_pledge_missing_relations(client, donor_profile):
    response = client.post('/api/Donor_Pledges', json={'donorProfile': {'donorId': donor_profile['donorId']}})

    assert response.status_code == 400


def test_create_pledge_unknown_ids(client, donor_profile):
    response = client.post('/api/Donor_Pledges', json={
        'donorProfile': {'donorId': donor_profile['donorId']},
        'matchedRequest': {'requestId': 404},
    })

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Invalid donorId or requestId'}


def test_list_and_get_pledges(client, pledge):
    listed = client.get('/api/Donor_Pledges').get_json()
    assert [p['pledgeId'] for p in listed] == [pledge['pledgeId']]

    response = client.get(f"/api/Donor_Pledges/{pledge['pledgeId']}")
    assert response.status_code == 200
    assert response.get_json()['message'] == 'On my way'


def test_get_unknown_pledge(client):
    assert client.get('/api/Donor_Pledges/3').status_code == 404


def test_pledges_by_request(client, pledge, register, blood_request):
    other = register(email='other@example.com')
    other_request = client.post('/api/Blood_Requests', json={
        'neededBloodType': 'AB', 'unitsNeeded': 1, 'user': {'userId': other['userId']},
    }).get_json()

    matching = client.get(f"/api/Donor_Pledges/byRequest/{blood_request['requestId']}").get_json()
    empty = client.get(f"/api/Donor_Pledges/byRequest/{other_request['requestId']}").get_json()

    assert [p['pledgeId'] for p in matching] == [pledge['pledgeId']]
    assert empty == []


# ------------------------- #
# Donations
# ------------------------- #
def test_create_donation(client, donor_profile, blood_request):
    response = client.post('/api/Donations', json={
        'donorProfile': {'donorId': donor_profile['donorId']},
        'fulfilledRequest': {'requestId': blood_request['requestId']},
        'unitsDonated': 1,
        'outcome': 'SUCCESS',
        'donationTime': '2030-01-10T14:00:00',
        'confirmedByRequester': True,
    })

    assert response.status_code == 200
    body = response.get_json()
    assert body['donationId'] is not None
    assert body['unitsDonated'] == 1
    assert body['confirmedByRequester'] is True
    assert body['donationTime'] == '2030-01-10T14:00:00'
    assert body['donorProfile']['donorId'] == donor_profile['donorId']
    assert body['fulfilledRequest']['requestId'] == blood_request['requestId']


def test_create_donation_missing_ids(client, donor_profile):
    response = client.post('/api/Donations', json={'donorProfile': {'donorId': donor_profile['donorId']}})

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Missing donorProfile or fulfilledRequest IDs'}


def test_create_donation_unknown_ids(client, blood_request):
    response = client.post('/api/Donations', json={
        'donorProfile': {'donorId': 77},
        'fulfilledRequest': {'requestId': blood_request['requestId']},
    })

    assert response.status_code == 400
    assert response.get_json() == {'error': 'Invalid donorId or requestId'}


def test_list_and_delete_donations(client, donor_profile, blood_request):
    created = client.post('/api/Donations', json={
        'donorProfile': {'donorId': donor_profile['donorId']},
        'fulfilledRequest': {'requestId': blood_request['requestId']},
    }).get_json()

    assert [d['donationId'] for d in client.get('/api/Donations').get_json()] == [created['donationId']]

    response = client.delete(f"/api/Donations/{created['donationId']}")
    assert response.status_code == 204
    assert client.get('/api/Donations').get_json() == []


def test_delete_unknown_donation(client):
    response = client.delete('/api/Donations/1')

    assert response.status_code == 404
    assert response.get_json() == {'error': 'Donation not found'}


def test_deleting_request_removes_its_pledges(client, pledge, blood_request):
    client.delete(f"/api/Blood_Requests/{blood_request['requestId']}")

    assert client.get('/api/Donor_Pledges').get_json() == []
