"""
Topic Discovery: Sweep, Fit and Export

This script demonstrates how to:
1. Build a document-term matrix from a pre-tokenized corpus
2. Measure candidate topic counts with Arun2010 / CaoJuan2009 / Deveaud2014
3. Fit LDA at a chosen k and export beta, gamma, clusters and projections

Input: a text file with one document per line, tokens separated by whitespace
(lowercasing, stop-word removal and stemming are expected upstream).

Usage:
    python scripts/feature_engineering/topic_modeling_demo.py corpus.txt --num-topics 6
    python scripts/feature_engineering/topic_modeling_demo.py corpus.txt --num-topics 6 \
        --k-min 2 --k-max 10 --workers 4 --output-dir data/processed/topics
    python scripts/feature_engineering/topic_modeling_demo.py corpus.txt --num-topics 6 --skip-sweep
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from src.config import settings
from src.features.topic_modeling import (
    TopicModelingError,
    TopicPipelineOutput,
    run_topic_pipeline,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def load_tokenized_corpus(corpus_path: Path) -> List[List[str]]:
    """Read one whitespace-tokenized document per line (blank lines are empty documents)."""
    with open(corpus_path, 'r', encoding='utf-8') as f:
        documents = [line.split() for line in f]
    logger.info(f"Loaded {len(documents)} documents from {corpus_path}")
    return documents


def save_outputs(output: TopicPipelineOutput, output_dir: Path) -> None:
    """Write every output table as CSV."""
    output_dir.mkdir(parents=True, exist_ok=True)

    output.metric_table.to_csv(output_dir / "metrics.csv", index=False)
    output.beta_table.to_csv(output_dir / "beta.csv", index=False)
    output.gamma_table.to_csv(output_dir / "gamma.csv", index=False)
    output.clusters.to_csv(output_dir / "clusters.csv")
    output.projection.to_csv(output_dir / "projection.csv")

    with open(output_dir / "top_terms.txt", 'w', encoding='utf-8') as f:
        for topic_id, terms in output.top_terms.items():
            f.write(f"Topic {topic_id}: {', '.join(terms)}\n")

    logger.info(f"Saved outputs to {output_dir}")


def main():
    """Main execution flow."""
    config = settings.topic_modeling

    parser = argparse.ArgumentParser(description="Discover latent topics in a tokenized corpus")
    parser.add_argument("corpus", type=Path, help="One whitespace-tokenized document per line")
    parser.add_argument("--num-topics", type=int, required=True, help="Topic count for the final fit")
    parser.add_argument("--k-min", type=int, default=config.selection.k_min)
    parser.add_argument("--k-max", type=int, default=config.selection.k_max)
    parser.add_argument("--workers", type=int, default=config.selection.max_workers,
                        help="Processes for the topic-count sweep (1 = sequential)")
    parser.add_argument("--iterations", type=int, default=config.sampler.iterations)
    parser.add_argument("--burn-in", type=int, default=config.sampler.burn_in)
    parser.add_argument("--seed", type=int, default=config.sampler.seed)
    parser.add_argument("--clusters", type=int, default=config.analytics.n_clusters)
    parser.add_argument("--skip-sweep", action="store_true", help="Only run the final fit")
    parser.add_argument("--output-dir", type=Path, default=Path("data/processed/topics"))
    args = parser.parse_args()

    config = config.model_copy(update={
        'selection': config.selection.model_copy(update={
            'k_min': args.k_min, 'k_max': args.k_max, 'max_workers': args.workers,
        }),
        'sampler': config.sampler.model_copy(update={
            'iterations': args.iterations, 'burn_in': args.burn_in, 'seed': args.seed,
        }),
        'analytics': config.analytics.model_copy(update={'n_clusters': args.clusters}),
    })

    documents = load_tokenized_corpus(args.corpus)

    try:
        output = run_topic_pipeline(
            documents,
            num_topics=args.num_topics,
            config=config,
            run_sweep=not args.skip_sweep,
        )
    except TopicModelingError as e:
        logger.error(
            f"{type(e).__name__} on corpus of {len(documents)} documents: {e}"
        )
        sys.exit(1)

    save_outputs(output, args.output_dir)

    logger.info("=" * 80)
    for topic_id, terms in output.top_terms.items():
        logger.info(f"Topic {topic_id}: {', '.join(terms)}")
    logger.info("=" * 80)


if __name__ == "__main__":
    main()
