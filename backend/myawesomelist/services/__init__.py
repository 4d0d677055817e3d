"""Service layer: fetch coordination, persistence, embeddings and search"""
