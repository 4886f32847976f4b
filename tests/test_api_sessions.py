from __future__ import annotations

import pytest

from tests.fixtures.workflow_factory import offer_fields


async def _open(client, kind='offers', **body):
    response = await client.post(f'/v1/{kind}/sessions', json=body)
    assert response.status_code == 201
    return response.json()


@pytest.mark.anyio
async def test_offer_wizard_end_to_end(client) -> None:
    # Arrange
    session = await _open(client)
    base = f"/v1/offers/sessions/{session['session_id']}"
    assert session['current_step'] == 1
    assert session['step_key'] == 'setup'
    assert session['can_advance'] is False

    # Act
    prefilled = await client.post(f'{base}/prefill', json={'candidate_id': 'CAND-001'})
    await client.patch(
        base,
        json={
            'fields': {
                'grade': 'G7',
                'working_hours': 'Sun-Thu 8:00-17:00',
                'compensation': {'base_salary': 15000, 'housing': 3750},
            }
        },
    )
    step_two = await client.post(f'{base}/advance')
    letter = await client.post(f'{base}/letter/en')
    await client.post(f'{base}/approvers/template', json={'template': 'standard'})
    step_three = await client.post(f'{base}/advance')
    await client.patch(base, json={'fields': {'delivery_channel': 'email', 'signature_method': 'manual'}})
    step_four = await client.post(f'{base}/advance')
    step_five = await client.post(f'{base}/advance')
    committed = await client.post(f'{base}/advance', headers={'X-Actor': 'Nora'})

    # Assert
    assert prefilled.json()['outcome'] == 'succeeded'
    assert prefilled.json()['session']['fields']['candidate_name'] == 'Sara Ahmed'
    assert step_two.json()['session']['step_key'] == 'letter'
    assert 'Dear Sara Ahmed' in letter.json()['fields']['offer_letter_en']
    assert step_three.json()['session']['chain_status'] == 'pending_approval'
    assert step_four.json()['session']['current_step'] == 4
    assert step_five.json()['session']['current_step'] == 5

    body = committed.json()
    assert body['committed'] is True
    assert body['record']['id'] == 'OFF-001'
    assert body['record']['creator'] == 'Nora'
    assert len(body['record']['approval_chain']) == 2
    assert (await client.get(base)).status_code == 404


@pytest.mark.anyio
async def test_advance_with_missing_fields_is_422_and_keeps_errors(client) -> None:
    session = await _open(client)
    base = f"/v1/offers/sessions/{session['session_id']}"

    response = await client.post(f'{base}/advance')
    view = await client.get(base)

    assert response.status_code == 422
    assert response.json()['detail']['errors'] == {
        'candidate_id': 'Select a candidate',
        'requisition_id': 'Select a job requisition',
    }
    assert view.json()['current_step'] == 1
    assert view.json()['errors'] == response.json()['detail']['errors']


@pytest.mark.anyio
async def test_retreat_and_jump(client) -> None:
    session = await _open(client)
    base = f"/v1/offers/sessions/{session['session_id']}"
    await client.patch(base, json={'fields': offer_fields()})
    for _ in range(3):
        await client.post(f'{base}/advance')

    back = await client.post(f'{base}/retreat')
    jumped = await client.post(f'{base}/jump', json={'step': 1})
    ahead = await client.post(f'{base}/jump', json={'step': 3})

    assert back.json()['current_step'] == 3
    assert jumped.json()['current_step'] == 1
    assert ahead.status_code == 422


@pytest.mark.anyio
async def test_cancel_discards_the_session(client) -> None:
    session = await _open(client)
    base = f"/v1/offers/sessions/{session['session_id']}"
    await client.patch(base, json={'fields': offer_fields()})

    cancelled = await client.delete(base)
    listed = await client.get('/v1/offers')

    assert cancelled.status_code == 204
    assert (await client.get(base)).status_code == 404
    assert listed.json()['meta']['total'] == 0


@pytest.mark.anyio
async def test_edit_session_on_existing_draft(client) -> None:
    created = await client.post('/v1/offers', json={'payload': offer_fields()})
    record_id = created.json()['id']

    session = await _open(client, seed_record_id=record_id)
    base = f"/v1/offers/sessions/{session['session_id']}"
    await client.patch(base, json={'fields': {'grade': 'G9'}})
    saved = await client.post(f'{base}/save')

    assert session['record_id'] == record_id
    assert saved.status_code == 201
    assert saved.json()['id'] == record_id
    assert saved.json()['payload']['grade'] == 'G9'
    assert saved.json()['version'] == 2


@pytest.mark.anyio
async def test_open_session_on_missing_record_is_404(client) -> None:
    response = await client.post('/v1/offers/sessions', json={'seed_record_id': 'OFF-404'})

    assert response.status_code == 404


@pytest.mark.anyio
async def test_prefill_unknown_candidate_reports_failure(client) -> None:
    session = await _open(client)

    response = await client.post(
        f"/v1/offers/sessions/{session['session_id']}/prefill", json={'candidate_id': 'CAND-404'}
    )

    assert response.status_code == 200
    assert response.json()['outcome'] == 'failed'
    assert response.json()['session']['fields'] == {}


@pytest.mark.anyio
async def test_session_approver_routes(client) -> None:
    session = await _open(client)
    base = f"/v1/offers/sessions/{session['session_id']}/approvers"

    await client.post(base, json={'name': 'Omar', 'position': 'Engineering Manager'})
    added = await client.post(base, json={'name': 'Huda', 'position': 'HR Department'})
    first, second = (a['id'] for a in added.json()['approval_chain'])
    moved = await client.post(f'{base}/{second}/move', json={'direction': 'up'})
    removed = await client.delete(f'{base}/{first}')
    unknown = await client.post(f'{base}/template', json={'template': 'board'})

    assert added.status_code == 201
    assert [a['id'] for a in moved.json()['approval_chain']] == [second, first]
    assert [a['id'] for a in removed.json()['approval_chain']] == [second]
    assert unknown.status_code == 422


@pytest.mark.anyio
async def test_onboarding_wizard_with_task_checklist(client) -> None:
    # Arrange
    session = await _open(client, kind='onboardings')
    base = f"/v1/onboardings/sessions/{session['session_id']}"
    await client.post(f'{base}/prefill', json={'candidate_id': 'CAND-001'})
    await client.patch(base, json={'fields': {'owner': 'HR Team'}})

    # Act
    templated = await client.post(f'{base}/tasks/template', json={'template': 'it'})
    added = await client.post(f'{base}/tasks', json={'title': 'Meet the team', 'assignee': 'Manager'})
    removed = await client.delete(f'{base}/tasks/template-1')
    blank = await client.post(f'{base}/tasks', json={'title': ' '})
    steps = [await client.post(f'{base}/advance') for _ in range(5)]

    # Assert
    assert len(templated.json()['fields']['tasks']) == 4
    assert added.json()['fields']['tasks'][-1]['id'] == 'task-5'
    assert [t['id'] for t in removed.json()['fields']['tasks']][0] == 'template-2'
    assert blank.status_code == 422
    assert [s.status_code for s in steps] == [200] * 5
    record = steps[-1].json()['record']
    assert record['id'] == 'ONB-001'
    assert record['payload']['employee']['start_date'] == '2024-04-01'
    assert len(record['payload']['tasks']) == 4


@pytest.mark.anyio
async def test_patching_draft_slots_is_422_and_session_stays_usable(client) -> None:
    session = await _open(client)
    base = f"/v1/offers/sessions/{session['session_id']}"

    chain = await client.patch(base, json={'fields': {'approval_chain': [{'name': 'Omar'}]}})
    status = await client.patch(base, json={'fields': {'status': 'bogus', 'grade': 'G7'}})
    view = await client.get(base)

    assert chain.status_code == 422
    assert chain.json()['detail']['fields'] == ['approval_chain']
    assert status.status_code == 422
    assert view.status_code == 200
    assert view.json()['approval_chain'] == []
    assert view.json()['chain_status'] == 'approved'
    assert view.json()['fields'] == {}


@pytest.mark.anyio
async def test_saving_an_empty_session_is_422(client) -> None:
    session = await _open(client)
    base = f"/v1/offers/sessions/{session['session_id']}"
    await client.post(f'{base}/approvers', json={'name': 'Omar', 'position': 'Engineering Manager'})

    response = await client.post(f'{base}/save')
    view = await client.get(base)

    assert response.status_code == 422
    assert response.json()['detail']['reason'] == 'Nothing to save'
    assert view.status_code == 200
    assert len(view.json()['approval_chain']) == 1


@pytest.mark.anyio
async def test_last_step_commit_revalidates_earlier_steps(client) -> None:
    # Arrange
    session = await _open(client)
    base = f"/v1/offers/sessions/{session['session_id']}"
    await client.patch(base, json={'fields': offer_fields()})
    for _ in range(4):
        await client.post(f'{base}/advance')

    # Act
    await client.patch(base, json={'fields': {'candidate_id': ''}})
    response = await client.post(f'{base}/advance')
    listed = await client.get('/v1/offers')

    # Assert
    assert response.status_code == 422
    assert response.json()['detail']['step'] == 1
    assert response.json()['detail']['errors'] == {'candidate_id': 'Select a candidate'}
    assert listed.json()['meta']['total'] == 0
    assert (await client.get(base)).json()['current_step'] == 5


@pytest.mark.anyio
async def test_task_update_route_and_checklist_progress(client) -> None:
    # Arrange
    session = await _open(client, kind='onboardings')
    base = f"/v1/onboardings/sessions/{session['session_id']}"
    offer = await _open(client)
    await client.post(f'{base}/tasks/template', json={'template': 'general'})

    # Act
    done = await client.patch(f'{base}/tasks/template-1', json={'status': 'completed'})
    renamed = await client.patch(f'{base}/tasks/template-2', json={'assignee': 'Security'})
    missing = await client.patch(f'{base}/tasks/task-99', json={'status': 'completed'})
    unknown_status = await client.patch(f'{base}/tasks/template-2', json={'status': 'finished'})

    # Assert
    assert done.json()['fields']['tasks'][0] == {
        'title': 'Prepare workstation',
        'assignee': 'IT',
        'id': 'template-1',
        'status': 'completed',
    }
    assert done.json()['task_progress'] == 0.25
    assert renamed.json()['fields']['tasks'][1]['assignee'] == 'Security'
    assert renamed.json()['fields']['tasks'][1]['status'] == 'pending'
    assert missing.status_code == 404
    assert unknown_status.status_code == 422
    assert session['task_progress'] == 0.0
    assert offer['task_progress'] is None
