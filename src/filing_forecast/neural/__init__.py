from .network import NeuralNetwork

__all__ = ['NeuralNetwork']
