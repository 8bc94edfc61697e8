from clubhouse import create_app, socketio
from clubhouse.services.ticker import start_lifecycle_ticker

app = create_app()

if __name__ == '__main__':
    # Push lifecycle changes (e.g. pending -> complete) to connected clients
    start_lifecycle_ticker(app)
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True)
