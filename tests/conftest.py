"""Shared methods, resolvers and fixtures for the test-suite."""

from __future__ import annotations

from typing import Optional

import pytest
from pydantic import BaseModel
from rpcclient import Client
from rpcserver import Resolvers, Server
from rpcwire import RpcError, method


class Empty(BaseModel):
    pass


class Echo(BaseModel):
    arg: str


class Add(BaseModel):
    a: int
    b: int


class Fetch(BaseModel):
    url: str
    accept: Optional[str] = None


class Record(BaseModel):
    event: str


METHODS = {
    "hello": method(Empty, str),
    "echo": method(Echo, str),
    "add": method(Add, int),
    "fetch": method(Fetch, str),
    "record": method(Record, bool),
    "fail": method(Empty, str),
    "teapot": method(Empty, str),
}

resolvers = Resolvers()


@resolvers.handler("hello")
def hello(req, context, meta):
    return "Hello World!"


@resolvers.handler("echo")
async def echo(req, context, meta):
    return req.arg


@resolvers.handler("add")
async def add(req, context, meta):
    return req.a + req.b


@resolvers.handler("fetch")
def fetch(req, context, meta):
    return f"{req.url}#{req.accept}"


@resolvers.handler("record")
async def record(req, context, meta):
    """Append the event and call metadata to the list passed as context."""
    context.append((req.event, meta))
    return True


@resolvers.handler("fail")
async def fail(req, context, meta):
    raise RuntimeError("boom")


@resolvers.handler("teapot")
async def teapot(req, context, meta):
    raise RpcError("I'm a teapot", 418, {"brew": "earl grey"})


@pytest.fixture
def methods():
    return METHODS


@pytest.fixture
def server() -> Server:
    return Server(METHODS, resolvers)


@pytest.fixture
def client(server) -> Client:
    """Client wired straight into the in-process server."""
    return Client(METHODS, server)
