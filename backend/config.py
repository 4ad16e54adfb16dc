import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of front-end origins allowed to open a socket
    CORS_ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            'CORS_ALLOWED_ORIGINS',
            'http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173',
        ).split(',')
        if origin.strip()
    ]
    # Simulation rate (ticks per second)
    TICK_RATE_HZ = int(os.environ.get('TICK_RATE_HZ', '60'))
    # Points needed to win a match
    WIN_SCORE = int(os.environ.get('WIN_SCORE', '10'))
    # Jolt timers (seconds)
    JOLT_COOLDOWN_SEC = float(os.environ.get('JOLT_COOLDOWN_SEC', '1.0'))
    SPEED_PENALTY_SEC = float(os.environ.get('SPEED_PENALTY_SEC', '1.5'))
    # Disable to drive Match.tick() by hand (tests)
    TICK_LOOP_ENABLED = os.environ.get('TICK_LOOP_ENABLED', '1') not in ('0', 'false', 'False')
