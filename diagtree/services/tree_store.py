import os
import glob
import logging
from typing import Dict, List, Optional
from diagtree.core import config
from diagtree.models.tree import TreeDocument, TreeSummary
from diagtree.services.validator import validate_document

logger = logging.getLogger(__name__)

def list_tree_files(trees_dir: str) -> List[str]:
    return sorted(glob.glob(os.path.join(trees_dir, "*.json")))

def load_tree_file(file_path: str) -> TreeDocument:
    """Parses a tree description file. Raises OSError or ValueError."""
    with open(file_path, "r", encoding="utf-8") as f:
        content = f.read()
    return TreeDocument.from_json(content)

class TreeStore:
    """Read-only registry of the tree files in a directory, keyed by file stem."""

    def __init__(self, trees_dir: Optional[str] = None, validate_on_load: Optional[bool] = None):
        self.trees_dir = trees_dir or config.TREES_DIR
        self.validate_on_load = config.VALIDATE_ON_LOAD if validate_on_load is None else validate_on_load
        self.trees: Dict[str, TreeDocument] = {}
        self.reload()

    def reload(self) -> int:
        """Re-scans the directory and swaps in the new set of trees."""
        if not os.path.isdir(self.trees_dir):
            logger.warning(f"Trees directory {self.trees_dir} not found.")
            self.trees = {}
            return 0

        trees: Dict[str, TreeDocument] = {}
        for file_path in list_tree_files(self.trees_dir):
            tree_id = os.path.splitext(os.path.basename(file_path))[0]
            try:
                document = load_tree_file(file_path)
            except (OSError, ValueError) as e:
                logger.error(f"Error loading tree from {file_path}: {e}")
                continue

            if self.validate_on_load:
                defects = validate_document(document)
                if defects:
                    logger.warning(
                        f"Skipping invalid tree {tree_id}: " + "; ".join(str(d) for d in defects)
                    )
                    continue

            trees[tree_id] = document

        self.trees = trees
        logger.info(f"Loaded {len(trees)} diagnostic trees from {self.trees_dir}")
        return len(trees)

    def get_tree(self, tree_id: str) -> Optional[TreeDocument]:
        return self.trees.get(tree_id)

    def list_trees(self) -> List[TreeSummary]:
        return [
            TreeSummary(
                id=tree_id,
                title=document.title,
                description=document.description,
                category=document.category,
                difficulty=document.difficulty,
                motorcycle=document.motorcycle_name,
                node_count=document.node_count,
            )
            for tree_id, document in self.trees.items()
        ]
