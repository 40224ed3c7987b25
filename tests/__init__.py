"""
Topic Discovery - Test Suite

Test modules organized by functionality:
- unit/topic_modeling/ - DTM builder, Gibbs sampler, metrics, selector, analytics, pipeline
- unit/ - Shared utilities and configuration
"""
