"""
Users Handler - Lambda function for profiles and user administration.
"""

from typing import Any, Dict

from aws_lambda_powertools.event_handler import Response
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from cloudmart.handlers.utils.dependencies import get_current_user, get_user_service
from cloudmart.handlers.utils.observability import logger, metrics, tracer
from cloudmart.handlers.utils.rest_api_resolver import USERS_PATH, build_resolver, ok, paged, parse_body, query_param
from cloudmart.models.input import UpdateUserRequest
from cloudmart.models.output import UserResponse

app = build_resolver()


@app.get(f'{USERS_PATH}/me')
@tracer.capture_method
def get_me() -> Response:
    return ok(UserResponse.from_user(get_current_user(app)))


@app.get(USERS_PATH)
@tracer.capture_method
def list_users() -> Response:
    users = get_user_service().list_users(get_current_user(app), sort_by=query_param(app, 'sort_by', 'created_at'))
    return ok(paged(app, users, UserResponse.from_user))


@app.get(f'{USERS_PATH}/<user_id>')
@tracer.capture_method
def get_user(user_id: str) -> Response:
    return ok(UserResponse.from_user(get_user_service().get_user(user_id, get_current_user(app))))


@app.put(f'{USERS_PATH}/<user_id>')
@tracer.capture_method
def update_user(user_id: str) -> Response:
    current_user = get_current_user(app)
    request = parse_body(app, UpdateUserRequest)
    user = get_user_service().update_user(user_id, request, current_user)
    return ok(UserResponse.from_user(user), message='User updated successfully')


@app.delete(f'{USERS_PATH}/<user_id>')
@tracer.capture_method
def delete_user(user_id: str) -> Response:
    get_user_service().delete_user(user_id, get_current_user(app))
    return ok(message='User deleted successfully')


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST, clear_state=True)
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return app.resolve(event, context)
