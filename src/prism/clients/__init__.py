from prism.clients.rpc import ChainRPC

__all__ = ["ChainRPC"]
