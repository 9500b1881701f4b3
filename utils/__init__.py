# 工具模块按需从子模块导入，例如 utils.auth、utils.sparse_update
