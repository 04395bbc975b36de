from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from wordbank.dispatcher import ADD, LIST, PREFLIGHT, REMOVE, Dispatcher

router = APIRouter()

METHOD_OPERATIONS = {
    'GET': LIST,
    'HEAD': LIST,
    'PATCH': ADD,
    'POST': ADD,
    'DELETE': REMOVE,
    'OPTIONS': PREFLIGHT,
}

def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher

async def words_endpoint(request: Request):
    operation = METHOD_OPERATIONS.get(request.method, request.method.lower())
    body = await request.body() if operation in (ADD, REMOVE) else b''
    result = await get_dispatcher(request).dispatch(operation, body)
    if result.content is None or request.method == 'HEAD':
        return Response(status_code=result.status_code)
    return JSONResponse(result.content, status_code=result.status_code)

# No method list: every method reaches the dispatcher, which acknowledges the ones it does not support.
router.add_route('/words', words_endpoint, include_in_schema=False)
