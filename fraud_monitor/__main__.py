import uvicorn

from fraud_monitor import config

if __name__ == "__main__":
    uvicorn.run("fraud_monitor.main:app", host=config.HOST, port=config.PORT)
