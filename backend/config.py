import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list, shared by Flask-CORS and Socket.IO
    CORS_ALLOWED_ORIGINS = os.environ.get(
        'CORS_ALLOWED_ORIGINS',
        'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
    ).split(',')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Seconds a disconnected participant is kept before removal
    DISCONNECT_GRACE_SEC = float(os.environ.get('DISCONNECT_GRACE_SEC', '30'))
    SESSION_ID_LENGTH = int(os.environ.get('SESSION_ID_LENGTH', '8'))
    # Estimation points offered to clients
    VOTE_VALUES = [1, 2, 3, 5, 8, 13, 20, 40, 100]
    # Optional: reject votes outside VOTE_VALUES at the socket boundary
    STRICT_VOTE_VALUES = os.environ.get('STRICT_VOTE_VALUES', '0').lower() in ('1', 'true', 'yes')
