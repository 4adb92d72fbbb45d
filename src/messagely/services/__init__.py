from .routers import AuthAPI, UserAPI, MessageAPI
