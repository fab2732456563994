import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))

# Capacity of the thread pool serving synchronous endpoints
WORKER_THREADS = int(os.getenv("WORKER_THREADS", "40"))

BURN_ITERATIONS = int(os.getenv("BURN_ITERATIONS", "10000000"))

SIMULATE_FAIL = os.getenv("SIMULATE_FAIL", "false")
