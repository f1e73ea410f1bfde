from .pipeline import CostPipeline

__all__ = ['CostPipeline']
