import os

from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    static_folder = current_app.static_folder
    if static_folder and os.path.isfile(os.path.join(static_folder, 'index.html')):
        return current_app.send_static_file('index.html')
    return jsonify({'message': 'Welcome to the arena game server!'})


@main.route('/health')
def health():
    registry = current_app.extensions['arena'].registry
    return jsonify({'ok': True, 'rooms': len(registry)})
