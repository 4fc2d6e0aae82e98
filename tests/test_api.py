def _join(client, name, role='player'):
    return client.post('/join', json={'name': name, 'role': role}).get_json()


def _new_game(client, name='Week 1'):
    res = client.post('/api/games', json={'name': name})
    assert res.status_code == 201
    return res.get_json()


def test_join_finds_or_creates_user(client):
    res = client.post('/join', json={'name': 'Alice', 'role': 'player'})
    assert res.status_code == 201
    alice = res.get_json()
    assert alice['streak'] == 0
    again = client.post('/join', json={'name': 'Alice', 'role': 'player'})
    assert again.status_code == 200
    assert again.get_json()['id'] == alice['id']
    assert client.post('/join', json={'name': 'Bob', 'role': 'coach'}).status_code == 400
    assert client.post('/join', json={'role': 'player'}).status_code == 400


def test_create_and_list_games(client):
    assert client.post('/api/games', json={'name': '  '}).status_code == 400
    week1 = _new_game(client, 'Week 1')
    week2 = _new_game(client, 'Week 2')
    client.post(f"/api/games/{week1['id']}/status", json={'status': 'finished'})
    listed = client.get('/api/games').get_json()
    assert {g['id'] for g in listed} == {week1['id'], week2['id']}
    active = client.get('/api/games?active=1').get_json()
    assert [g['id'] for g in active] == [week2['id']]
    assert client.post(f"/api/games/{week2['id']}/status", json={'status': 'paused'}).status_code == 400


def test_outcome_vocabulary(client):
    outcomes = client.get('/api/outcomes').get_json()
    assert len(outcomes) == 18
    assert {'value': 'RUN_LEFT', 'type': 'run', 'depth': None, 'direction': 'left'} in outcomes


def test_full_play_flow(client):
    admin = _join(client, 'admin', 'admin')
    alice = _join(client, 'Alice')
    bob = _join(client, 'Bob')
    game = _new_game(client)
    gid = game['id']
    assert admin['role'] == 'admin'

    res = client.post(f'/api/games/{gid}/plays', json={'quarter': '1', 'down': 1})
    assert res.status_code == 201
    play = res.get_json()
    assert play['sequence_number'] == 1
    assert play['status'] == 'open'

    console = client.get(f'/api/games/{gid}').get_json()
    assert console['game']['status'] == 'live'
    assert console['current_play']['id'] == play['id']

    res = client.post(f"/api/games/{gid}/plays/{play['id']}/predict",
                      json={'user_id': alice['id'], 'predicted_outcome': 'RUN_LEFT', 'game_breaker': 'on'})
    assert res.status_code == 201
    assert res.get_json()['game_breaker'] is True
    client.post(f"/api/games/{gid}/plays/{play['id']}/predict",
                json={'user_id': bob['id'], 'predicted_outcome': 'PASS_SHORT_LEFT'})

    status = client.get(f"/api/games/{gid}/play-status?user_id={alice['id']}").get_json()
    assert status['current_play']['id'] == play['id']
    assert status['user_prediction']['predicted_outcome'] == 'RUN_LEFT'
    assert status['game_breaker_available'] is True

    assert client.post(f"/api/games/{gid}/plays/{play['id']}/lock").status_code == 200
    res = client.post(f"/api/games/{gid}/plays/{play['id']}/predict",
                      json={'user_id': bob['id'], 'predicted_outcome': 'RUN_LEFT'})
    assert res.status_code == 409
    assert 'locked' in res.get_json()['error']

    res = client.post(f"/api/games/{gid}/plays/{play['id']}/score", json={'actual_outcome': 'RUN_LEFT'})
    assert res.status_code == 200
    assert res.get_json()['status'] == 'scored'

    board = client.get(f'/api/games/{gid}/leaderboard').get_json()
    assert board['leaderboard'] == [
        {'user_id': alice['id'], 'user_name': 'Alice', 'total_points': 420},
        {'user_id': bob['id'], 'user_name': 'Bob', 'total_points': 0},
    ]
    assert client.get(f'/api/games/{gid}').get_json()['current_play'] is None

    res = client.post(f"/api/games/{gid}/plays/{play['id']}/correct", json={'actual_outcome': 'PASS_SHORT_LEFT'})
    assert res.status_code == 200
    assert res.get_json()['actual_outcome'] == 'PASS_SHORT_LEFT'
    board = client.get(f'/api/games/{gid}/leaderboard').get_json()['leaderboard']
    assert [(r['user_name'], r['total_points']) for r in board] == [('Bob', 490), ('Alice', 0)]

    mine = client.get(f"/api/games/{gid}/predictions?user_id={bob['id']}").get_json()
    assert [p['points_awarded'] for p in mine] == [490]


def test_error_mapping(client):
    alice = _join(client, 'Alice')
    game = _new_game(client)
    gid = game['id']
    other = _new_game(client, 'Week 2')
    play = client.post(f'/api/games/{gid}/plays', json={'quarter': 1, 'down': 1}).get_json()

    assert client.post(f'/api/games/{gid}/plays', json={'quarter': 1}).status_code == 400
    assert client.post(f'/api/games/{gid}/plays', json={'quarter': 7, 'down': 1}).status_code == 400
    assert client.post('/api/games/999/plays', json={'quarter': 1, 'down': 1}).status_code == 404
    assert client.post(f"/api/games/{gid}/plays/{play['id']}/score",
                       json={'actual_outcome': 'HAIL_MARY'}).status_code == 400
    assert client.post(f"/api/games/{gid}/plays/{play['id']}/correct",
                       json={'actual_outcome': 'RUN_LEFT'}).status_code == 409
    # Play belongs to a different game
    assert client.post(f"/api/games/{other['id']}/plays/{play['id']}/lock").status_code == 404
    assert client.post(f"/api/games/{gid}/plays/{play['id']}/predict",
                       json={'user_id': 999, 'predicted_outcome': 'RUN_LEFT'}).status_code == 404
    assert client.post(f"/api/games/{gid}/plays/{play['id']}/predict",
                       json={'user_id': alice['id'], 'predicted_outcome': 'RUN_UP'}).status_code == 400
    assert client.get(f'/api/games/{gid}/play-status').status_code == 400
    assert client.get('/api/games/999/leaderboard').status_code == 404


def test_game_breaker_rejected_later_in_drive(client):
    alice = _join(client, 'Alice')
    gid = _new_game(client)['id']
    p1 = client.post(f'/api/games/{gid}/plays', json={'quarter': 1, 'down': 1}).get_json()
    client.post(f"/api/games/{gid}/plays/{p1['id']}/predict",
                json={'user_id': alice['id'], 'predicted_outcome': 'RUN_LEFT', 'game_breaker': True})
    client.post(f"/api/games/{gid}/plays/{p1['id']}/score", json={'actual_outcome': 'RUN_CENTER'})
    p2 = client.post(f'/api/games/{gid}/plays', json={'quarter': 1, 'down': 2}).get_json()

    status = client.get(f"/api/games/{gid}/play-status?user_id={alice['id']}").get_json()
    assert status['game_breaker_available'] is False
    res = client.post(f"/api/games/{gid}/plays/{p2['id']}/predict",
                      json={'user_id': alice['id'], 'predicted_outcome': 'RUN_LEFT', 'game_breaker': True})
    assert res.status_code == 409
    assert res.get_json()['error'] == 'Game Breaker already used this drive'


def test_join_race_returns_existing_user(client, monkeypatch):
    from playcall import main

    alice = _join(client, 'Alice')
    real_find = main.find_user
    calls = []

    def miss_first_lookup(name):
        # The first lookup misses, as if another request inserted the row in between
        calls.append(name)
        return None if len(calls) == 1 else real_find(name)

    monkeypatch.setattr(main, 'find_user', miss_first_lookup)
    res = client.post('/join', json={'name': 'Alice', 'role': 'player'})
    assert res.status_code == 200
    assert res.get_json()['id'] == alice['id']
    assert calls == ['Alice', 'Alice']
    # The session is usable after the rollback
    assert client.post('/join', json={'name': 'Bob', 'role': 'player'}).status_code == 201


def test_invalid_outcome_maps_to_bad_request(client):
    from playcall.errors import InvalidOutcome, PlayEngineError

    assert InvalidOutcome.status_code == PlayEngineError.status_code == 400
    assert issubclass(InvalidOutcome, ValueError)
    gid = _new_game(client)['id']
    play = client.post(f'/api/games/{gid}/plays', json={'quarter': 1, 'down': 1}).get_json()
    res = client.post(f"/api/games/{gid}/plays/{play['id']}/score", json={'actual_outcome': 'HAIL_MARY'})
    assert res.status_code == 400
    assert 'HAIL_MARY' in res.get_json()['error']
