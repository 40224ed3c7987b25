"""
End-to-end tests for LDATrainer and run_topic_pipeline.

Scenario: six documents built from two disjoint vocabularies, four terms
after frequency filtering, k=2, 500 iterations, burn-in 100, seed 42.
"""

import numpy as np
import pytest

from src.config.features.topic_modeling import (
    TopicModelingAnalyticsConfig,
    TopicModelingConfig,
    TopicModelingSamplerConfig,
    TopicModelingSelectionConfig,
    TopicModelingVocabularyConfig,
)
from src.features.topic_modeling import (
    EmptyVocabularyError,
    FrequencyBounds,
    InvalidClusterCountError,
    InvalidTopicCountError,
    LDATrainer,
    fit_lda,
    run_topic_pipeline,
)

FRUIT = {"apple", "banana"}
MACHINES = {"engine", "motor"}


@pytest.fixture
def scenario_config() -> TopicModelingConfig:
    return TopicModelingConfig(
        vocabulary=TopicModelingVocabularyConfig(min_doc_freq=2, max_doc_freq=float("inf")),
        sampler=TopicModelingSamplerConfig(
            iterations=500, burn_in=100, thin=1, alpha=0.1, eta=0.01, seed=42
        ),
        selection=TopicModelingSelectionConfig(
            k_min=2, k_max=4, metrics=["Arun2010", "CaoJuan2009", "Deveaud2014"], max_workers=1
        ),
        analytics=TopicModelingAnalyticsConfig(n_clusters=2, top_n_terms=2),
    )


class TestTwoTopicScenario:
    """The sampler must recover two clearly separated vocabularies."""

    def test_top_terms_are_disjoint(self, two_topic_dtm, scenario_hyperparameters):
        from src.features.topic_modeling import TopicModelingAnalyzer

        result = fit_lda(two_topic_dtm, 2, scenario_hyperparameters)
        terms = TopicModelingAnalyzer(result).top_terms(n=2)
        assert set(terms[0]).isdisjoint(terms[1])
        assert {frozenset(terms[0]), frozenset(terms[1])} == {frozenset(FRUIT), frozenset(MACHINES)}

    def test_documents_load_on_their_topic(self, two_topic_dtm, scenario_hyperparameters):
        result = fit_lda(two_topic_dtm, 2, scenario_hyperparameters)
        fruit_topic = int(np.argmax(result.gamma[0]))
        machine_topic = 1 - fruit_topic
        assert np.all(result.gamma[:3, fruit_topic] > 0.7)
        assert np.all(result.gamma[3:, machine_topic] > 0.7)


class TestRunTopicPipeline:

    def test_outputs(self, two_topic_corpus, scenario_config):
        output = run_topic_pipeline(two_topic_corpus, num_topics=2, config=scenario_config)

        assert output.dtm.shape == (6, 4)
        assert len(output.metric_table) == 3 * 3
        assert set(output.metric_table["k"]) == {2, 3, 4}
        assert len(output.beta_table) == 2 * 4
        assert len(output.gamma_table) == 6 * 2
        assert output.projection.shape == (6, 2)
        assert set(output.top_terms[0]).isdisjoint(output.top_terms[1])

    def test_clusters_follow_vocabularies(self, two_topic_corpus, scenario_config):
        clusters = run_topic_pipeline(
            two_topic_corpus, num_topics=2, config=scenario_config, run_sweep=False
        ).clusters
        assert clusters[0] == clusters[1] == clusters[2]
        assert clusters[3] == clusters[4] == clusters[5]
        assert clusters[0] != clusters[3]

    def test_skipping_sweep_leaves_empty_metric_table(self, two_topic_corpus, scenario_config):
        output = run_topic_pipeline(
            two_topic_corpus, num_topics=2, config=scenario_config, run_sweep=False
        )
        assert output.sweep is None
        assert output.metric_table.empty

    def test_repeat_runs_are_identical(self, two_topic_corpus, scenario_config):
        a = run_topic_pipeline(two_topic_corpus, num_topics=2, config=scenario_config, run_sweep=False)
        b = run_topic_pipeline(two_topic_corpus, num_topics=2, config=scenario_config, run_sweep=False)
        assert a.gamma_table.equals(b.gamma_table)
        assert a.clusters.equals(b.clusters)

    def test_k_of_one_aborts(self, two_topic_corpus, scenario_config):
        with pytest.raises(InvalidTopicCountError):
            run_topic_pipeline(two_topic_corpus, num_topics=1, config=scenario_config, run_sweep=False)

    def test_sweep_range_beyond_corpus_aborts(self, two_topic_corpus, scenario_config):
        config = scenario_config.model_copy(update={
            "selection": scenario_config.selection.model_copy(update={"k_max": 10})
        })
        with pytest.raises(InvalidTopicCountError):
            run_topic_pipeline(two_topic_corpus, num_topics=2, config=config)

    def test_too_many_clusters_aborts(self, two_topic_corpus, scenario_config):
        config = scenario_config.model_copy(update={
            "analytics": scenario_config.analytics.model_copy(update={"n_clusters": 7})
        })
        with pytest.raises(InvalidClusterCountError):
            run_topic_pipeline(two_topic_corpus, num_topics=2, config=config, run_sweep=False)

    def test_rare_only_corpus_aborts(self, scenario_config):
        with pytest.raises(EmptyVocabularyError):
            run_topic_pipeline([["a"], ["b"], ["c"]], num_topics=2, config=scenario_config)


class TestLDATrainer:

    @pytest.fixture
    def trainer(self) -> LDATrainer:
        return LDATrainer(
            num_topics=2, iterations=200, burn_in=50, random_state=42,
            bounds=FrequencyBounds(min_doc_freq=2),
        )

    def test_model_info(self, trainer, two_topic_corpus):
        info = trainer.train(two_topic_corpus)
        assert info.num_topics == 2
        assert info.num_documents == 6
        assert info.num_dropped_documents == 0
        assert info.vocabulary_size == 4
        assert info.num_tokens == sum(len(d) for d in two_topic_corpus) - 2
        assert info.log_likelihood == trainer.result.log_likelihoods[-1]
        assert 1.0 <= info.perplexity < 4.0
        assert set(info.topic_top_words) == {0, 1}

    def test_dropped_documents_counted(self, mixed_corpus):
        trainer = LDATrainer(num_topics=2, iterations=20, burn_in=5, bounds=FrequencyBounds(min_doc_freq=2))
        info = trainer.train(mixed_corpus)
        assert info.num_documents == 4
        assert info.num_dropped_documents == 2

    def test_print_topics(self, trainer, two_topic_corpus, capsys):
        trainer.train(two_topic_corpus)
        trainer.print_topics(num_words=2)
        out = capsys.readouterr().out
        assert "Topic 0" in out
        assert "Topic 1" in out

    def test_topic_descriptions_use_labels(self, two_topic_corpus):
        trainer = LDATrainer(
            num_topics=2, iterations=30, burn_in=10, random_state=7,
            bounds=FrequencyBounds(min_doc_freq=2), topic_labels={0: "first"},
        )
        trainer.train(two_topic_corpus)
        descriptions = trainer.topic_descriptions(num_words=2)
        assert descriptions[0].startswith("first: ")
        assert descriptions[1].startswith("Topic 1: ")

    def test_untrained_trainer_raises(self, trainer):
        with pytest.raises(ValueError, match="not trained"):
            trainer.print_topics()
        with pytest.raises(ValueError, match="not trained"):
            trainer.analyzer()
