import logging

from dotenv import load_dotenv
from fastapi import FastAPI

load_dotenv()

# config reads the environment at import, so it comes after load_dotenv
from cart_transform import config
from cart_transform.router import cart_transform

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Add-on Cart Transform", version="1.0")
app.state.transform_options = config.build_options()

app.include_router(cart_transform.router)  # exposes GET/POST /cart-transform
