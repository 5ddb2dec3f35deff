import os

import dotenv
import uvicorn

dotenv.load_dotenv()

if __name__ == "__main__":
    uvicorn.run(
        "crud_blog.main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8000")),
    )
