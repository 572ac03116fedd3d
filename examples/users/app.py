"""Users — the smallest complete lyven app.

Demonstrates an injectable service, a structural component with an
injected constructor, path variables converted to ``int``, a raw
request body, and handlers returning ``Single``.

Run:
    python app.py
    lyven routes app:app
"""

from typing import Annotated

from lyven import App, AppConfig, Body, Single, component, get, inject, injectable, post


@injectable
class UserService:
    def find_all_users(self) -> str:
        return "List of users from service"

    def create_user(self, user_data: str) -> str:
        return f"User created: {user_data}"


@component(selector="user-controller")
class UserController:
    @inject
    def __init__(self, user_service: UserService) -> None:
        self.user_service = user_service

    @get("/users")
    def get_users(self) -> Single[str]:
        return Single.of(self.user_service.find_all_users())

    @post("/users")
    def create_user(self, user_data: Annotated[str, Body]) -> Single[str]:
        return Single.of(self.user_service.create_user(user_data))

    @get("/users/{id}")
    def get_user_by_id(self, id: int) -> Single[str]:
        return Single.of(f"User {id} details")


app = App(AppConfig(dev_mode=True)).register(UserController)


if __name__ == "__main__":
    import logging

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s - %(message)s")
    print(app.handle("GET", "/users").block())
    print(app.handle("POST", "/users", body="ada").block())
    print(app.handle("GET", "/users/42").block())
