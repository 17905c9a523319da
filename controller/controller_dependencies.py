from fastapi import Depends, Request
from config.clients import Clients
from service.answer_service import AnswerService
from service.embedding_service import EmbeddingResolver
from service.message_service import MessageService
from service.similarity_service import SimilarityCascade
from service.write_back_service import WriteBackCoordinator


def get_clients(request: Request) -> Clients:
    return request.app.state.clients


def get_answer_service(clients: Clients = Depends(get_clients)) -> AnswerService:
    _fast = clients.fast_tier()
    _durable = clients.durable
    _resolver = EmbeddingResolver(
        clients.openai(), clients.embedding_cache(), clients.embedding_store()
    )
    _cascade = SimilarityCascade(_fast, _durable)
    _writer = WriteBackCoordinator([_fast, _durable])
    return AnswerService(_resolver, _cascade, _writer, clients.openai())


def get_message_service(
    clients: Clients = Depends(get_clients),
    answers: AnswerService = Depends(get_answer_service),
) -> MessageService:
    return MessageService(clients.slack(), answers, clients.openai())
