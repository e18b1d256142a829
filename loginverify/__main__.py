import uvicorn
from .config import settings

def main():
    uvicorn.run("loginverify.app:app", host=settings.app_host, port=settings.app_port)

if __name__ == "__main__":
    main()
