def test_index_without_client_bundle(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_index_serves_client_bundle(tmp_path):
    from arena import create_app
    from config import Config

    (tmp_path / 'index.html').write_text('<html>arena</html>')

    class BundleConfig(Config):
        TESTING = True
        START_TICK_LOOP = False
        STATIC_FOLDER = str(tmp_path)

    res = create_app(BundleConfig).test_client().get('/')
    assert res.status_code == 200
    assert b'arena' in res.data


def test_health(client, flask_app):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json() == {'ok': True, 'rooms': 0}

    flask_app.extensions['arena'].registry.get_or_create('red')
    assert client.get('/health').get_json()['rooms'] == 1


def test_list_rooms(client, flask_app):
    gateway = flask_app.extensions['arena']
    gateway.on_join('sid1', 'Alice', 'red')
    gateway.on_join('sid2', 'Bob', 'red')
    gateway.on_shoot('sid1', 0.0)

    res = client.get('/api/rooms')
    assert res.status_code == 200
    assert res.get_json() == [{'room_id': 'red', 'players': 2, 'bullets': 1}]


def test_room_state(client, flask_app):
    flask_app.extensions['arena'].on_join('sid1', 'Alice', 'red')

    res = client.get('/api/rooms/red/state')
    assert res.status_code == 200
    state = res.get_json()
    assert state['room_id'] == 'red'
    assert state['mapWidth'] == 2000
    assert state['players']['sid1']['username'] == 'Alice'
    assert state['bullets'] == []


def test_room_state_unknown_room(client):
    res = client.get('/api/rooms/nope/state')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'Room not found'}
