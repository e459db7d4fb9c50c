"""
Integration tests for the users Lambda handler.
"""

from cloudmart.handlers import users_handler


def test_me_requires_token(aws, api_event, invoke):
    status, body = invoke(users_handler, api_event("GET", "/api/users/me"))

    assert status == 401
    assert body["status"] == 401
    assert body["error"] == "Unauthorized"


def test_me_with_invalid_token(aws, api_event, invoke):
    status, body = invoke(users_handler, api_event("GET", "/api/users/me", token="garbage"))

    assert status == 401
    assert body["message"] == "Invalid token"


def test_me(aws, api_event, invoke, customer, token_for):
    status, body = invoke(users_handler, api_event("GET", "/api/users/me", token=token_for(customer)))

    assert status == 200
    assert body["data"]["id"] == customer.id
    assert body["data"]["first_name"] == "Jane"


def test_list_users_paged_for_admin(aws, api_event, invoke, admin, make_user, token_for):
    for _ in range(3):
        make_user()

    status, body = invoke(users_handler, api_event(
        "GET", "/api/users", token=token_for(admin), query={"page": "1", "size": "3", "sort_by": "email"}
    ))

    page = body["data"]
    assert status == 200
    assert page["total_elements"] == 4
    assert page["total_pages"] == 2
    assert page["page"] == 1
    assert len(page["content"]) == 1
    assert page["last"] is True


def test_list_users_forbidden_for_customer(aws, api_event, invoke, customer, token_for):
    status, body = invoke(users_handler, api_event("GET", "/api/users", token=token_for(customer)))

    assert status == 403
    assert body["message"] == "Admin access required"


def test_invalid_page_size(aws, api_event, invoke, admin, token_for):
    status, body = invoke(users_handler, api_event("GET", "/api/users", token=token_for(admin), query={"size": "500"}))

    assert status == 400
    assert body["message"] == "Page size must be between 1 and 100"


def test_get_user_by_admin(aws, api_event, invoke, admin, customer, token_for):
    status, body = invoke(users_handler, api_event("GET", f"/api/users/{customer.id}", token=token_for(admin)))

    assert status == 200
    assert body["data"]["email"] == customer.email


def test_get_unknown_user(aws, api_event, invoke, admin, token_for):
    status, body = invoke(users_handler, api_event("GET", "/api/users/missing", token=token_for(admin)))

    assert status == 404
    assert body["message"] == "User not found with id: missing"


def test_update_own_profile(aws, api_event, invoke, customer, token_for):
    status, body = invoke(users_handler, api_event(
        "PUT", f"/api/users/{customer.id}", {"address": "9 Elm St"}, token=token_for(customer)
    ))

    assert status == 200
    assert body["message"] == "User updated successfully"
    assert body["data"]["address"] == "9 Elm St"


def test_update_other_profile_forbidden(aws, api_event, invoke, customer, seller, token_for):
    status, body = invoke(users_handler, api_event(
        "PUT", f"/api/users/{seller.id}", {"first_name": "X"}, token=token_for(customer)
    ))

    assert status == 403
    assert body["message"] == "You can only update your own profile"


def test_delete_user_then_token_stops_working(aws, api_event, invoke, admin, customer, token_for):
    customer_token = token_for(customer)

    status, body = invoke(users_handler, api_event("DELETE", f"/api/users/{customer.id}", token=token_for(admin)))
    assert status == 200
    assert body["message"] == "User deleted successfully"

    status, body = invoke(users_handler, api_event("GET", "/api/users/me", token=customer_token))
    assert status == 401
    assert body["message"] == "User account is not active"
